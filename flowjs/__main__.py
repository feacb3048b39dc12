from .compiler import main

raise SystemExit(main())
