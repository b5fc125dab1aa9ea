from doflip.cli import main

main()
