"""Shared fixtures."""

import pytest
from graphql import build_schema

from gql_fragments.core.classifier import reset_schema_analysis
from gql_fragments.core.parser import read_schema

LIBRARY_SDL = """
scalar DateTime
scalar Flags

enum SectionType {
  NEWS
  SPORTS
}

enum Status {
  ACTIVE
  INACTIVE
}

type Audio {
  url: String!
  duration: Int
}

type Item {
  id: ID!
  title: String
  audio: Audio
  tags: [String!]!
  section: SectionType
  related: [Item!]
  author: User
}

type User {
  id: ID!
  name: String
  items: [Item]
  createdAt: DateTime
}

interface Node {
  id: ID!
}

union SearchResult = Item | User

type Query {
  loadItem(id: ID!, status: Status, flags: Flags, since: DateTime): Item
  user(id: ID!): User
  search(term: String!): [SearchResult]
  node(id: ID!): Node
  version: String
}

type Mutation {
  updateItem(id: ID!, section: SectionType, title: String): Item
}
"""


@pytest.fixture
def library_sdl():
    return LIBRARY_SDL


@pytest.fixture
def library_ir():
    """IR of a small schema with a cycle (Item <-> User) and a self reference."""
    return read_schema(build_schema(LIBRARY_SDL))


@pytest.fixture(autouse=True)
def _reset_classification():
    """Keep the shared argument classification from leaking between tests."""
    reset_schema_analysis()
    yield
    reset_schema_analysis()
