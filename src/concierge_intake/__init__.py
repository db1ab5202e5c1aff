# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Concierge Intake - invitation-gated intake API."""

__version__ = "0.3.0"
