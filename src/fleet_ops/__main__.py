from fleet_ops.cli import main

main()
