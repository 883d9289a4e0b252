"""Allow running jdkpack as a module: python -m jdkpack"""

from jdkpack.cli import main

if __name__ == "__main__":
    main()
