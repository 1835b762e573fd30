# boardroom/__main__.py
# Entry point for `python -m boardroom`.
from .cli import main

if __name__ == "__main__":
    main()
