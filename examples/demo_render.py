#!/usr/bin/env python3
"""Demonstration of generated selection maps and query rendering.

This script shows how to:
1. Read a GraphQL schema
2. Generate the selection-map module
3. Render queries from the generated maps

Note: This demo doesn't make real API calls - it only prints queries.
"""

import importlib.util
import tempfile
from pathlib import Path

from graphql import build_schema

from gql_fragments import QueryRenderer, render_operation
from gql_fragments.core import Classification, FragmentsConfig, FragmentsGenerator, read_schema

SCHEMA = """
enum Role { ADMIN MEMBER }

type Post {
  id: ID!
  title: String
  author: User
}

type User {
  id: ID!
  name: String
  role: Role
  posts: [Post!]
}

type Query {
  user(id: ID!, role: Role): User
  posts(first: Int): [Post]
}
"""


def main():
    print("=== Selection Map Demo ===\n")

    print("1. Reading schema...")
    ir = read_schema(build_schema(SCHEMA))
    print(f"   {len(ir.object_types)} object types, {len(ir.queries)} queries")

    with tempfile.TemporaryDirectory() as tmpdir:
        print("\n2. Generating fragments module...")
        config = FragmentsConfig(types_import="", base_dir=Path(tmpdir))
        path = FragmentsGenerator(ir, config).generate(Path(tmpdir) / "fragments.py")
        print(path.read_text())

        spec = importlib.util.spec_from_file_location("fragments", path)
        fragments = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(fragments)

    print("3. Rendering queries...")
    renderer = QueryRenderer(Classification(fragments.QUERY_FLAGS, fragments.QUERY_ENUMS))
    print(renderer.render("user", fragments.user, {"id": "42", "role": "ADMIN"}))
    print(renderer.render("posts", fragments.PostMap, {"first": 10}))

    operation = render_operation("user", fragments.UserMap, {"id": "42"}, {"id": "ID!"}, "GetUser")
    print(operation.query)
    print(operation.variables)


if __name__ == "__main__":
    main()
