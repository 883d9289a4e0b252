"""jdkpack - JDK build orchestration and packaging."""

__version__ = "0.1.0"
