from docmirror._cli import main

main()
