"""GraphQL request builders for pull request retrieval.

Each builder returns a `GraphQLRequest`: the query document plus a mutable
variables mapping. Paginated callers advance cursors by updating
`request.variables` in place and re-sending the same request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

PAGE_SIZE = 100

_ACTOR_FIELDS = """
          __typename
          login
"""


@dataclass(frozen=True, slots=True)
class GraphQLRequest:
    """A GraphQL query document and the variables to send with it."""

    operation: str
    query: str
    variables: dict[str, Any] = field(default_factory=dict)


PULL_REQUEST_DETAILS_QUERY = f"""
query PullRequestDetails($owner: String!, $name: String!, $number: Int!) {{
  repository(owner: $owner, name: $name) {{
    pullRequest(number: $number) {{
      author {{{_ACTOR_FIELDS}      }}
      isCrossRepository
      headRefOid
      headRefName
      headRepository {{
        name
        owner {{
          login
        }}
      }}
      baseRefName
    }}
  }}
}}
"""

PULL_REQUEST_COMMITS_QUERY = f"""
query PullRequestCommits($owner: String!, $name: String!, $number: Int!, $cursor: String) {{
  repository(owner: $owner, name: $name) {{
    pullRequest(number: $number) {{
      commits(first: {PAGE_SIZE}, after: $cursor) {{
        pageInfo {{
          endCursor
          hasNextPage
        }}
        nodes {{
          commit {{
            oid
            author {{
              user {{{_ACTOR_FIELDS}              }}
            }}
            committer {{
              user {{{_ACTOR_FIELDS}              }}
            }}
            committedViaWeb
            pushedDate
            parents(first: 3) {{
              nodes {{
                oid
              }}
            }}
          }}
        }}
      }}
    }}
  }}
}}
"""

PULL_REQUEST_DISCUSSION_QUERY = f"""
query PullRequestDiscussion(
  $owner: String!
  $name: String!
  $number: Int!
  $commentCursor: String
  $reviewCursor: String
) {{
  repository(owner: $owner, name: $name) {{
    pullRequest(number: $number) {{
      comments(first: {PAGE_SIZE}, after: $commentCursor) {{
        pageInfo {{
          endCursor
          hasNextPage
        }}
        nodes {{
          author {{{_ACTOR_FIELDS}          }}
          body
          createdAt
        }}
      }}
      reviews(first: {PAGE_SIZE}, after: $reviewCursor, states: [APPROVED, CHANGES_REQUESTED]) {{
        pageInfo {{
          endCursor
          hasNextPage
        }}
        nodes {{
          author {{{_ACTOR_FIELDS}          }}
          state
          body
          submittedAt
        }}
      }}
    }}
  }}
}}
"""

COMMIT_HISTORY_QUERY = f"""
query CommitHistory($owner: String!, $name: String!, $oid: GitObjectID!, $cursor: String) {{
  repository(owner: $owner, name: $name) {{
    object(oid: $oid) {{
      ... on Commit {{
        history(first: {PAGE_SIZE}, after: $cursor) {{
          pageInfo {{
            endCursor
            hasNextPage
          }}
          nodes {{
            oid
            pushedDate
          }}
        }}
      }}
    }}
  }}
}}
"""


def pull_request_details(owner: str, name: str, number: int) -> GraphQLRequest:
    return GraphQLRequest(
        operation="PullRequestDetails",
        query=PULL_REQUEST_DETAILS_QUERY,
        variables={"owner": owner, "name": name, "number": number},
    )


def pull_request_commits(owner: str, name: str, number: int) -> GraphQLRequest:
    return GraphQLRequest(
        operation="PullRequestCommits",
        query=PULL_REQUEST_COMMITS_QUERY,
        variables={"owner": owner, "name": name, "number": number, "cursor": None},
    )


def pull_request_discussion(owner: str, name: str, number: int) -> GraphQLRequest:
    """Comments and approving/blocking reviews, paginated with two cursors."""

    return GraphQLRequest(
        operation="PullRequestDiscussion",
        query=PULL_REQUEST_DISCUSSION_QUERY,
        variables={
            "owner": owner,
            "name": name,
            "number": number,
            "commentCursor": None,
            "reviewCursor": None,
        },
    )


def commit_history(owner: str, name: str, oid: str) -> GraphQLRequest:
    """Commit history rooted at `oid`, read from the given (possibly forked) repository."""

    return GraphQLRequest(
        operation="CommitHistory",
        query=COMMIT_HISTORY_QUERY,
        variables={"owner": owner, "name": name, "oid": oid, "cursor": None},
    )
