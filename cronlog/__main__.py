from cronlog.cli import main

main()
