"""Synthesis-time model of CloudWatch Logs cross-account destinations.

The `logdest` package lets users declare log destinations whose physical
names and ARNs are only known once the construct tree is complete.

Key features:
- deferred value cells resolved in one explicit synthesis pass;
- generated or user supplied physical names;
- ARN building and parsing for slash and colon conventions;
- destination policies serialized lazily, empty policies as `''`;
- owned and imported destinations usable interchangeably.
"""
