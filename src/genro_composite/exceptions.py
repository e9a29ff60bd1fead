# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Composite node exceptions."""

from __future__ import annotations


class CompositeError(Exception):
    """Base exception for composite node errors."""

    pass


class UnknownAttributeError(CompositeError, KeyError):
    """Raised when reading or writing an attribute the node never declared."""

    pass


class UnknownItemTypeError(CompositeError, LookupError):
    """Raised when no factory is registered for an item type."""

    pass
