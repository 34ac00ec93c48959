from substrate_cli.cli import main

raise SystemExit(main())
