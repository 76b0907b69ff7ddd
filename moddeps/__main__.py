from moddeps.modules.cli import main

raise SystemExit(main())
