from rbxupload.cli import main

raise SystemExit(main())
