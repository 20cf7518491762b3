# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   project_service  - CRUD, team membership and invitations for Project
#   section_service  - lookup and creation for Section
#   user_service     - lookup and creation for User
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
