DEFAULT_MASTER_CONFIG_FILE = "pdx_tasks.json"
DEFAULT_ASSETS_FOLDER = "PkgAssets"
TEAM_ASSIGNMENTS_SCHEMA = "TeamAssignments.schema.json"

ENGINE_LOG_TAG = "orchestrator"

ENTITY_TEAM = "team"
ENTITY_ROLE = "role"
ENTITY_FIELD_SECURITY_PROFILE = "fieldsecurityprofile"

TEAM_ROLES_RELATIONSHIP = "teamroles_association"
TEAM_PROFILES_RELATIONSHIP = "teamprofiles_association"

SECURITY_ROLE_IDS_KEY = "securityRoleIds"
FIELD_SECURITY_PROFILE_IDS_KEY = "fieldSecurityProfileIds"
RELATION_SET_KEYS = (SECURITY_ROLE_IDS_KEY, FIELD_SECURITY_PROFILE_IDS_KEY)

# Host severity names mapped onto loguru levels
HOST_LOG_LEVELS = {
    "verbose": "DEBUG",
    "information": "INFO",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
}
