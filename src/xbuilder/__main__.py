from xbuilder.cli.main import main

main()
