"""Allow ``python -m dloop_sizer``."""
from .cli import main

if __name__ == "__main__":
    main()
