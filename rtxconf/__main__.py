from rtxconf.cli import main

raise SystemExit(main())
