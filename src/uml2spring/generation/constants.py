"""Constants for backend code generation."""

# Artifact groups, in emission order; each is also the sub-package name
ENTITIES = "entities"
DTO = "dto"
MAPPERS = "mappers"
REPOSITORIES = "repositories"
SERVICES = "services"
CONTROLLERS = "controllers"

ARTIFACT_GROUPS = (ENTITIES, DTO, MAPPERS, REPOSITORIES, SERVICES, CONTROLLERS)

# Java source layout
INDENT = "    "
DEFAULT_STRING_LENGTH = 255

# Hibernate proxy properties hidden from JSON serialization
PROXY_PROPERTIES = ("hibernateLazyInitializer", "handler")

API_PREFIX = "/api"
