"""Allow `python -m nami_api`."""
from nami_api.cli import main

if __name__ == "__main__":
    main()
