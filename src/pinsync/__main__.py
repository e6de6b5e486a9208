from pinsync.cli import main

raise SystemExit(main())
