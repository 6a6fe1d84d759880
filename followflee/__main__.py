from followflee.experiments.cli import main

main()
