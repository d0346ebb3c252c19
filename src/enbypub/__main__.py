from enbypub.cli import main

main()
