"""User-facing response messages, keyed by stable error code."""

ERROR_MESSAGES: dict[str, str] = {
    "VALIDATION_FAILED": "Validation failed",
    "BAD_REQUEST": "Bad request",
    "TOKEN_NOT_FOUND": "Authorization token not found",
    "AUTHENTICATION_FAILED": "Authentication failed",
    "INVALID_CREDENTIALS": "Invalid email or password",
    "INVALID_CREDENTIALS_OR_INACTIVE_ID": "Invalid credentials or inactive account",
    "INSUFFICIENT_PERMISSIONS": "Insufficient permissions",
    "NOT_OWNER": "You can only modify your own resources",
    "USER_NOT_FOUND": "User not found",
    "USER_ALREADY_EXISTS": "User with this email already exists",
    "ROLE_NOT_FOUND": "Role not found",
    "ROLE_ALREADY_EXISTS": "Role with this name already exists",
    "ROLE_ASSIGNMENT_FAILED": "Default role could not be assigned",
    "INVALID_PERMISSION_FORMAT": "Invalid permission format",
    "POST_NOT_FOUND": "Post not found",
    "INVALID_RESET_TOKEN": "Invalid or expired password reset token",
    "EMAIL_NOT_SENT": "Email could not be sent",
    "MASTER_DATA_NOT_FOUND": "No master data found for the specified type",
    "MASTER_DATA_SYNC_FAILED": "Master data sync failed",
    "NOT_FOUND": "Resource not found",
    "CONFLICT": "Resource already exists",
    "SERVICE_UNAVAILABLE": "Service temporarily unavailable",
    "METHOD_NOT_ALLOWED": "Method not allowed",
    "TOO_MANY_REQUESTS": "Too many requests, please try again later.",
    "INTERNAL_SERVER_ERROR": "Internal server error",
}


class SuccessMessages:
    USER_REGISTERED = "User registered successfully"
    USER_SIGNIN = "User signed in successfully"
    PASSWORD_RESET_LINK_SENT = "Password reset link sent to your email"
    PASSWORD_RESET = "Password has been reset successfully"
    USERS_RETRIEVED = "Users retrieved successfully"
    USER_PROFILE_RETRIEVED = "User profile retrieved successfully"
    USER_UPDATED = "User updated successfully"
    USER_DELETED = "User deleted successfully"
    ROLE_ASSIGNED_TO_USER = "Role assigned to user successfully"
    ROLE_REMOVED_FROM_USER = "Role removed from user successfully"
    ROLE_CREATED = "Role created successfully"
    ROLES_RETRIEVED = "Roles retrieved successfully"
    ROLE_RETRIEVED = "Role retrieved successfully"
    ROLE_UPDATED = "Role updated successfully"
    ROLE_DELETED = "Role deleted successfully"
    PERMISSIONS_RETRIEVED = "Permissions retrieved successfully"
    POSTS_RETRIEVED = "Posts retrieved successfully"
    POST_RETRIEVED = "Post retrieved successfully"
    POST_CREATED = "Post created successfully"
    POST_UPDATED = "Post updated successfully"
    POST_DELETED = "Post deleted successfully"
    MASTER_DATA_RETRIEVED = "Common data retrieved successfully"
    MASTER_DATA_SYNCED = "Master data synchronized successfully"
