from zkverify.cli import main

raise SystemExit(main())
