from bosh_exporter.cli import main

raise SystemExit(main())
