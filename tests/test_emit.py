"""Tests for import synthesis and file emission."""

import pytest

from sourcerer.codegen.core.emit import (
    EmitConfig,
    compute_relative_path,
    compute_user_module_path,
    emit_files,
)
from sourcerer.codegen.core.errors import ExportCollision
from sourcerer.codegen.core.orchestrator import OrchestratorResult
from sourcerer.codegen.core.registry import SymbolRegistry
from sourcerer.codegen.core.symbols import (
    AssignedSymbol,
    ExternalImport,
    RenderedSymbol,
    SymbolDeclaration,
    UserModuleRef,
)
from sourcerer.codegen.core.syntax import (
    Declaration,
    DeclarationKind,
    ExportDefault,
    ExportKind,
    ExportNamed,
    Identifier,
    ImportDeclaration,
    RawStatement,
    wrap_export,
)


def _const(name, source=None):
    return Declaration(DeclarationKind.CONST, name, source or f"const {name} = 1;")


def _symbol(name, capability, node=None, exports=ExportKind.NAMED, **kwargs):
    return RenderedSymbol(name=name, capability=capability,
                          node=node if node is not None else _const(name),
                          exports=exports, **kwargs)


def _result(entries, references=None):
    """Orchestrator result from ``(file_path, RenderedSymbol)`` pairs."""
    declarations = []
    groups = {}
    for file_path, symbol in entries:
        declaration = SymbolDeclaration(symbol.name, symbol.capability)
        declarations.append(declaration)
        groups.setdefault(file_path, []).append(AssignedSymbol(declaration, file_path))
    return OrchestratorResult(
        declarations=declarations,
        rendered=[symbol for _, symbol in entries],
        file_groups=groups,
        registry=SymbolRegistry(),
        references=references or {},
    )


def _contents(files):
    return {emitted.path: emitted.content for emitted in files}


class TestRelativePaths:
    @pytest.mark.parametrize(
        "from_file, to_file, expected",
        [
            ("schemas.ts", "types.ts", "./types.js"),
            ("user/queries.ts", "types.ts", "../types.js"),
            ("routes/user.ts", "user/queries.ts", "../user/queries.js"),
            ("a/b/c.ts", "a/d/e.ts", "../d/e.js"),
            ("index.ts", "db/types.ts", "./db/types.js"),
        ],
    )
    def test_compute_relative_path(self, from_file, to_file, expected):
        assert compute_relative_path(from_file, to_file) == expected

    def test_user_module_path_relative_output_dir(self):
        path = compute_user_module_path("user/queries.ts", "./db.ts", "/proj", "generated")
        assert path == "../../db.js"

    def test_user_module_path_absolute_output_dir(self):
        path = compute_user_module_path("queries.ts", "src/db.ts", "/proj", "/out")
        assert path == "../proj/src/db.js"


class TestCrossFileImports:
    def test_schema_file_imports_type_from_types_file(self):
        result = _result(
            [
                ("types.ts", _symbol(
                    "User", "types:User",
                    Declaration(DeclarationKind.INTERFACE, "User", "interface User {\n  id: number;\n}"),
                )),
                ("schemas.ts", _symbol(
                    "UserSchema", "schemas:User",
                    _const("UserSchema", "const UserSchema = z.object({});"),
                    external_imports=[ExternalImport("zod", names=("z",))],
                )),
            ],
            references={"schemas:User": ["types:User"]},
        )

        files = _contents(emit_files(result, EmitConfig(header_comment="// generated")))

        assert files["schemas.ts"] == (
            "// generated\n\n"
            'import { z } from "zod";\n'
            'import { User } from "./types.js";\n'
            "\n"
            "export const UserSchema = z.object({});\n"
        )
        assert files["types.ts"] == (
            "// generated\n\nexport interface User {\n  id: number;\n}\n"
        )

    def test_same_file_references_need_no_import(self):
        result = _result(
            [("types.ts", _symbol("Role", "types:Role")),
             ("types.ts", _symbol("User", "types:User"))],
            references={"types:User": ["types:Role"]},
        )
        content = _contents(emit_files(result))["types.ts"]
        assert "import" not in content

    def test_one_import_per_target_file(self):
        result = _result(
            [
                ("user/queries.ts", _symbol("findUserById", "queries:kysely:User:findById")),
                ("user/queries.ts", _symbol("insertUser", "queries:kysely:User:insert")),
                ("types.ts", _symbol("User", "types:User")),
                ("types.ts", _symbol("UserInsert", "types:User:insert")),
                ("routes/user.ts", _symbol("userRoutes", "http-routes:hono:User")),
            ],
            references={
                "queries:kysely:User:findById": ["types:User"],
                "queries:kysely:User:insert": ["types:User", "types:User:insert"],
                "http-routes:hono:User": [
                    "queries:kysely:User:findById",
                    "queries:kysely:User:insert",
                ],
            },
        )
        files = _contents(emit_files(result))

        assert files["user/queries.ts"].count("import") == 1
        assert 'import { User, UserInsert } from "../types.js";' in files["user/queries.ts"]
        assert 'import { findUserById, insertUser } from "../user/queries.js";' in \
            files["routes/user.ts"]

    def test_unknown_reference_targets_are_ignored(self):
        result = _result([("a.ts", _symbol("A", "x:A"))], references={"x:A": ["x:Missing"]})
        assert "import" not in _contents(emit_files(result))["a.ts"]


class TestExternalAndUserImports:
    def test_external_imports_are_merged_per_module(self):
        result = _result([
            ("schemas.ts", _symbol("A", "s:A", external_imports=[
                ExternalImport("zod", names=("z",)),
                ExternalImport("kysely", types=("Kysely",)),
            ])),
            ("schemas.ts", _symbol("B", "s:B", external_imports=[
                ExternalImport("zod", names=("z", "ZodError")),
                ExternalImport("kysely", types=("Selectable",)),
                ExternalImport("hono", default="Hono"),
            ])),
        ])
        content = _contents(emit_files(result))["schemas.ts"]
        lines = content.splitlines()

        assert lines[:3] == [
            'import type { Kysely, Selectable } from "kysely";',
            'import { z, ZodError } from "zod";',
            'import Hono from "hono";',
        ]

    def test_namespace_import(self):
        result = _result([("a.ts", _symbol("A", "x:A", external_imports=[
            ExternalImport("node:path", namespace="path"),
        ]))])
        assert 'import * as path from "node:path";' in _contents(emit_files(result))["a.ts"]

    def test_relative_external_source_is_resolved_per_file(self):
        result = _result([("user/queries.ts", _symbol("A", "x:A", external_imports=[
            ExternalImport("./db.ts", names=("db",)),
        ]))])
        content = _contents(emit_files(result))["user/queries.ts"]
        assert 'import { db } from "../db.js";' in content

    def test_user_imports_come_first_and_are_deduplicated(self):
        db = UserModuleRef(path="./db.ts", named=("db",))
        result = _result(
            [
                ("user/queries.ts", _symbol("findUserById", "queries:kysely:User:findById",
                                            user_imports=[db])),
                ("user/queries.ts", _symbol("insertUser", "queries:kysely:User:insert",
                                            user_imports=[db],
                                            external_imports=[ExternalImport("kysely", names=("sql",))])),
                ("types.ts", _symbol("User", "types:User")),
            ],
            references={"queries:kysely:User:findById": ["types:User"]},
        )
        config = EmitConfig(config_dir="/proj", output_dir="generated")
        lines = _contents(emit_files(result, config))["user/queries.ts"].splitlines()

        assert lines[:3] == [
            'import { db } from "../../db.js";',
            'import { sql } from "kysely";',
            'import { User } from "../types.js";',
        ]

    def test_user_imports_skipped_without_directories(self):
        result = _result([("a.ts", _symbol("A", "x:A", user_imports=[
            UserModuleRef(path="./db.ts", named=("db",)),
        ]))])
        assert "db" not in _contents(emit_files(result, EmitConfig()))["a.ts"]

    def test_file_headers_are_deduplicated(self):
        result = _result([
            ("a.ts", _symbol("A", "x:A", file_header="/* eslint-disable */")),
            ("a.ts", _symbol("B", "x:B", file_header="/* eslint-disable */")),
        ])
        content = _contents(emit_files(result, EmitConfig(header_comment="// gen")))["a.ts"]
        assert content.startswith("// gen\n\n/* eslint-disable */\n\nexport const A")
        assert content.count("eslint-disable") == 1


class TestBody:
    def test_metadata_only_file_is_dropped(self):
        result = _result([
            ("user/meta.ts", _symbol("UserQueries", "queries:kysely:User",
                                     node=None, exports=ExportKind.NONE, metadata={"a": 1})),
            ("types.ts", _symbol("User", "types:User")),
        ])
        files = emit_files(result)
        assert [emitted.path for emitted in files] == ["types.ts"]

    def test_metadata_symbols_are_not_printed(self):
        result = _result([
            ("a.ts", _symbol("Hidden", "x:Hidden", exports=ExportKind.NONE)),
            ("a.ts", _symbol("Shown", "x:Shown")),
        ])
        content = _contents(emit_files(result))["a.ts"]
        assert "Hidden" not in content
        assert "export const Shown = 1;" in content

    def test_same_name_same_kind_collides(self):
        result = _result([
            ("types.ts", _symbol("User", "types:User")),
            ("types.ts", _symbol("User", "types:Account")),
        ])
        with pytest.raises(ExportCollision) as exc_info:
            emit_files(result)
        error = exc_info.value
        assert (error.file, error.export_name, error.export_kind) == ("types.ts", "User", "const")
        assert (error.capability1, error.capability2) == ("types:User", "types:Account")

    def test_same_name_different_kind_coexists(self):
        interface = Declaration(DeclarationKind.INTERFACE, "User", "interface User {}")
        result = _result([
            ("types.ts", _symbol("User", "types:User", interface)),
            ("types.ts", _symbol("User", "schemas:User")),
        ])
        content = _contents(emit_files(result))["types.ts"]
        assert "export interface User {}" in content
        assert "export const User = 1;" in content

    def test_same_name_in_different_files_is_fine(self):
        result = _result([
            ("a.ts", _symbol("User", "x:User")),
            ("b.ts", _symbol("User", "y:User")),
        ])
        assert len(emit_files(result)) == 2

    def test_blank_line_before_exports_keeps_doc_comment_attached(self):
        documented = Declaration(DeclarationKind.INTERFACE, "User", "interface User {}",
                                 comment="Registered accounts")
        result = _result([
            ("types.ts", _symbol("Role", "types:Role")),
            ("types.ts", _symbol("User", "types:User", documented)),
        ])
        content = _contents(emit_files(result))["types.ts"]
        assert content == (
            "export const Role = 1;\n"
            "\n"
            "/** Registered accounts */\n"
            "export interface User {}\n"
        )

    def test_default_export(self):
        node = Declaration(DeclarationKind.FUNCTION, "app", "function app() {}")
        result = _result([("a.ts", _symbol("app", "x:app", node, exports=ExportKind.DEFAULT))])
        assert "export default function app() {}" in _contents(emit_files(result))["a.ts"]

    def test_already_wrapped_nodes_are_kept(self):
        node = ExportNamed(_const("A"))
        result = _result([("a.ts", _symbol("A", "x:A", node))])
        content = _contents(emit_files(result))["a.ts"]
        assert content.count("export") == 1


class TestSyntax:
    def test_wrap_export(self):
        node = _const("A")
        assert wrap_export(node, ExportKind.NONE) is node
        assert isinstance(wrap_export(node, ExportKind.NAMED), ExportNamed)
        assert isinstance(wrap_export(node, ExportKind.DEFAULT), ExportDefault)

    def test_export_wrappers_report_inner_kind(self):
        interface = Declaration(DeclarationKind.INTERFACE, "User", "interface User {}")
        assert ExportNamed(interface).declaration_kind() is DeclarationKind.INTERFACE
        assert ExportDefault(interface).declaration_kind() is DeclarationKind.INTERFACE
        assert RawStatement("foo();").declaration_kind() is DeclarationKind.OTHER
        assert Identifier("x").declaration_kind() is DeclarationKind.OTHER

    def test_export_kind_coercion(self):
        assert ExportKind.coerce(True) is ExportKind.NAMED
        assert ExportKind.coerce(False) is ExportKind.NONE
        assert ExportKind.coerce(None) is ExportKind.NONE
        assert ExportKind.coerce("default") is ExportKind.DEFAULT

    def test_import_declaration_forms(self):
        assert ImportDeclaration("./x.js").to_source() == 'import "./x.js";'
        assert ImportDeclaration("kysely", named=["Kysely"], type_only=True).to_source() == \
            'import type { Kysely } from "kysely";'
        assert ImportDeclaration("react", named=["useState"], default="React").to_source() == \
            'import React, { useState } from "react";'
