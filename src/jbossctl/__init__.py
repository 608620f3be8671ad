"""jbossctl - command-line front end for jboss_harness."""

from jbossctl.app import app, main

__version__ = "0.1.0"

__all__ = ["app", "main"]
