from emchem.cli import main

raise SystemExit(main())
