"""Authentication infrastructure"""
from infrastructure.auth.jwt_service import create_access_token, create_refresh_token, decode_token
from infrastructure.auth.password_service import hash_password, verify_password
