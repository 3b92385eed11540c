"""
Authentication backend for email-based login.
"""

import logging

from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)
User = get_user_model()


class EmailBackend(ModelBackend):
    """
    Authenticate staff with their email address (case-insensitive) and password.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate user with email and password.

        Args:
            request: The request object
            username: The email address (Django passes the USERNAME_FIELD as ``username``)
            password: User password
            **kwargs: Additional arguments

        Returns:
            User object if authentication succeeds, None otherwise
        """
        login_credential = username or kwargs.get('email')
        if not login_credential or not password:
            return None

        try:
            user = User.objects.get(email__iexact=login_credential.strip())
        except User.DoesNotExist:
            # Run the default password hasher once to reduce timing
            # differences between an existing and non-existing user
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info(f"Failed login attempt for {login_credential}")
        return None
