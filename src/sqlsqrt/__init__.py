# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLsqrt core package.

Interactive SQL shell: statements go to the database, results come back
as paged box-drawing tables, dot-commands drive the shell itself.
"""
from .kernel import Session as Session  # noqa: F401 (re-export)
