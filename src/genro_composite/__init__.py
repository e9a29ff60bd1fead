# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-Composite - Composite nodes with selection reconciliation.

A lightweight, zero-dependency library letting a node own an ordered list
of child nodes while keeping the parent's selection, aggregate selected
state and active item consistent with its children.
"""

import logging

__version__ = "0.1.0"

from .attributes import Attribute, AttributeHost, Selected, Source, SourceKind
from .events import EventFacade, EventTarget, Subscription
from .exceptions import (
    CompositeError,
    UnknownAttributeError,
    UnknownItemTypeError,
)
from .node import Node
from .parent import ParentNode
from .registry import TypeRegistry, default_registry

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "Node",
    "ParentNode",
    # Host framework
    "Attribute",
    "AttributeHost",
    "EventFacade",
    "EventTarget",
    "Subscription",
    "TypeRegistry",
    "default_registry",
    # Values
    "Selected",
    "Source",
    "SourceKind",
    # Exceptions
    "CompositeError",
    "UnknownAttributeError",
    "UnknownItemTypeError",
]
