"""Test suite for the logdest package.

This package contains unit and integration tests validating deferred
value resolution, ARN handling, construct tree synthesis, deployment
file loading and the command line utilities.
"""
