#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
anodizer/visitor.py
===================

Depth-first traversal of parsed design files.

Provides:
- ``VisitResult`` - continue/stop signal returned by every callback
- ``DesignVisitor`` - base class with one default-continue hook per node kind
- ``walk_design_file`` / ``walk_design_unit`` / ``walk_declarations`` /
  ``walk_design_files`` - the fixed pre-order walker

Order: file → each unit → each declaration in source order, descending
into subprogram bodies.  For every declaration ``visit_declaration`` is
called first, then the kind-specific hook.  Returning ``STOP`` from any
hook unwinds immediately; no further siblings or descendants are seen.
"""

from __future__ import annotations

import enum
from typing import Iterable, Sequence

from anodizer import ast as A

__all__ = [
    "DesignVisitor",
    "VisitResult",
    "walk_declarations",
    "walk_design_file",
    "walk_design_files",
    "walk_design_unit",
]


class VisitResult(enum.Enum):
    CONTINUE = "continue"
    STOP = "stop"

    @property
    def should_continue(self) -> bool:
        return self is VisitResult.CONTINUE


CONTINUE = VisitResult.CONTINUE
STOP = VisitResult.STOP


class DesignVisitor:
    """Base class for design-tree consumers.

    Every ``visit_X`` hook returns :attr:`VisitResult.CONTINUE` by
    default; subclasses override the hooks they care about.
    Declaration-level hooks also receive the enclosing design unit.
    """

    # --- File & units ---

    def visit_design_file(self, file: A.DesignFile) -> VisitResult:
        return CONTINUE

    def visit_design_unit(self, unit: A.DesignUnit) -> VisitResult:
        return CONTINUE

    def visit_entity(self, unit: A.EntityDeclaration) -> VisitResult:
        return CONTINUE

    def visit_package(self, unit: A.PackageDeclaration) -> VisitResult:
        return CONTINUE

    def visit_package_instance(self, unit: A.PackageInstantiation) -> VisitResult:
        return CONTINUE

    def visit_context(self, unit: A.ContextDeclaration) -> VisitResult:
        return CONTINUE

    def visit_configuration(self, unit: A.ConfigurationDeclaration) -> VisitResult:
        return CONTINUE

    def visit_architecture(self, unit: A.ArchitectureBody) -> VisitResult:
        return CONTINUE

    def visit_package_body(self, unit: A.PackageBody) -> VisitResult:
        return CONTINUE

    # --- Declarations ---

    def visit_declaration(self, decl: A.Declaration, unit: A.DesignUnit) -> VisitResult:
        return CONTINUE

    def visit_type_declaration(self, decl: A.TypeDeclaration, unit: A.DesignUnit) -> VisitResult:
        return CONTINUE

    def visit_subtype_declaration(
        self, decl: A.SubtypeDeclaration, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_object_declaration(
        self, decl: A.ObjectDeclaration, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_component_declaration(
        self, decl: A.ComponentDeclaration, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_attribute_declaration(
        self, decl: A.AttributeDeclaration, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_attribute_specification(
        self, decl: A.AttributeSpecification, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_subprogram_declaration(
        self, decl: A.SubprogramDeclaration, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_subprogram_body(self, decl: A.SubprogramBody, unit: A.DesignUnit) -> VisitResult:
        return CONTINUE

    def visit_subprogram_instantiation(
        self, decl: A.SubprogramInstantiation, unit: A.DesignUnit
    ) -> VisitResult:
        return CONTINUE

    def visit_use_clause(self, decl: A.UseClause, unit: A.DesignUnit) -> VisitResult:
        return CONTINUE


# ═══════════════════════════════════════════════════════════════════════
#  Walker
# ═══════════════════════════════════════════════════════════════════════


_UNIT_HOOKS = {
    A.EntityDeclaration: "visit_entity",
    A.PackageDeclaration: "visit_package",
    A.PackageInstantiation: "visit_package_instance",
    A.ContextDeclaration: "visit_context",
    A.ConfigurationDeclaration: "visit_configuration",
    A.ArchitectureBody: "visit_architecture",
    A.PackageBody: "visit_package_body",
}

_DECLARATION_HOOKS = {
    A.TypeDeclaration: "visit_type_declaration",
    A.SubtypeDeclaration: "visit_subtype_declaration",
    A.ObjectDeclaration: "visit_object_declaration",
    A.ComponentDeclaration: "visit_component_declaration",
    A.AttributeDeclaration: "visit_attribute_declaration",
    A.AttributeSpecification: "visit_attribute_specification",
    A.SubprogramDeclaration: "visit_subprogram_declaration",
    A.SubprogramBody: "visit_subprogram_body",
    A.SubprogramInstantiation: "visit_subprogram_instantiation",
    A.UseClause: "visit_use_clause",
}


def _unit_declarations(unit: A.DesignUnit) -> Sequence[A.Declaration]:
    return getattr(unit, "declarations", ())


def walk_declarations(
    visitor: DesignVisitor,
    declarations: Iterable[A.Declaration],
    unit: A.DesignUnit,
) -> VisitResult:
    for decl in declarations:
        if not visitor.visit_declaration(decl, unit).should_continue:
            return STOP
        hook = _DECLARATION_HOOKS.get(type(decl))
        if hook is not None and not getattr(visitor, hook)(decl, unit).should_continue:
            return STOP
        if isinstance(decl, A.SubprogramBody):
            if not walk_declarations(visitor, decl.declarations, unit).should_continue:
                return STOP
    return CONTINUE


def walk_design_unit(visitor: DesignVisitor, unit: A.DesignUnit) -> VisitResult:
    if not visitor.visit_design_unit(unit).should_continue:
        return STOP
    hook = _UNIT_HOOKS.get(type(unit))
    if hook is not None and not getattr(visitor, hook)(unit).should_continue:
        return STOP
    return walk_declarations(visitor, _unit_declarations(unit), unit)


def walk_design_file(visitor: DesignVisitor, file: A.DesignFile) -> VisitResult:
    """Walk one design file; returns ``STOP`` if any hook stopped."""
    if not visitor.visit_design_file(file).should_continue:
        return STOP
    for unit in file.units:
        if not walk_design_unit(visitor, unit).should_continue:
            return STOP
    return CONTINUE


def walk_design_files(visitor: DesignVisitor, files: Iterable[A.DesignFile]) -> VisitResult:
    for file in files:
        if not walk_design_file(visitor, file).should_continue:
            return STOP
    return CONTINUE
