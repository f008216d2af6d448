"""Pull request summary reports for SonarQube analyses."""

__version__ = "1.0.0"
