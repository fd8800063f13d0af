"""
GitHub GraphQL queries.
"""

# Repositories of the organization with the signals used for ownership and
# the reviewers requested on each open pull request.
ORG_OVERVIEW_QUERY = """
query OrgOverview($org: String!) {
  organization(login: $org) {
    repositories(first: 100, orderBy: {field: CREATED_AT, direction: DESC}) {
      nodes {
        name
        url
        defaultBranchRef {
          target {
            ... on Commit {
              history(first: 5) {
                nodes {
                  author {
                    user {
                      login
                    }
                  }
                }
              }
            }
          }
        }
        pullRequests(first: 50, states: OPEN) {
          nodes {
            number
            title
            url
            author {
              login
            }
            reviewRequests(first: 10) {
              nodes {
                requestedReviewer {
                  ... on User {
                    login
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""
