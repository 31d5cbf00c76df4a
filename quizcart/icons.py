"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

icons.py - Status markers used in console output.
"""

SUCCESS = "✅"
WARNING = "⚠️"
ERROR = "❌"
