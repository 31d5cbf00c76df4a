"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

Quizcart - convert IMS Common Cartridge quizzes into forms.
"""

__version__ = "0.1.0"
