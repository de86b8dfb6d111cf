"""Allow ``python -m anodizer``."""

from anodizer.main import main

if __name__ == "__main__":
    raise SystemExit(main())
