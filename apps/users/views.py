# apps/users/views.py

import logging

from django.contrib.auth import authenticate, get_user_model, login, logout
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api import IsAdminRole
from apps.core.exceptions import ValidationError
from . import services
from .serializers import LoginSerializer, RegisterSerializer, RoleSerializer, UserSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


class LoginView(APIView):
    """
    Session login with email and password.

    Unapproved teachers may log in; the API tells them their account is pending.
    """
    permission_classes = [permissions.AllowAny]
    throttle_scope = 'auth'

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request,
            username=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
        )
        if user is None:
            return Response(
                {'error': 'Invalid email or password.', 'code': 'invalid_credentials'},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        login(request, user)
        logger.info(f"User {user.email} logged in")
        return Response(UserSerializer(user).data)


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_scope = 'auth'

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.register_teacher(**serializer.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class TeacherViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Administrator view of staff accounts with approval and role actions.
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = super().get_queryset()
        pending = self.request.query_params.get('pending')
        if pending in ('1', 'true'):
            queryset = services.pending_teachers()
        return queryset

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        user = services.set_approval(pk, True, performed_by=request.user)
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        if str(request.user.pk) == str(pk):
            raise ValidationError('You cannot suspend your own account.')
        user = services.set_approval(pk, False, performed_by=request.user)
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['post'])
    def role(self, request, pk=None):
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.change_role(pk, serializer.validated_data['role'], performed_by=request.user)
        return Response(UserSerializer(user).data)
