from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    WalletSerializer,
    InitWalletsInputSerializer,
    InitWalletsResponseSerializer,
)
from apps.wallets.services import (
    get_agent,
    initialize_wallets,
    AgentNotFoundError,
)


@extend_schema(
    request=InitWalletsInputSerializer,
    responses={200: InitWalletsResponseSerializer, 201: InitWalletsResponseSerializer},
    description="Create the food and earnings wallets of a delivery agent if missing.",
    tags=['wallets'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def init_wallets(request):
    """Initialize wallets for an agent (owner or staff)."""
    serializer = InitWalletsInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    agent_id = serializer.validated_data['agent_id']

    try:
        agent = get_agent(agent_id)
    except AgentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not agent.is_owned_by(request.user):
        return Response(
            {'error': 'You can only initialize your own wallets'},
            status=status.HTTP_403_FORBIDDEN
        )

    wallets, created = initialize_wallets(agent_id=agent.id)

    return Response(
        {
            'success': True,
            'created': created,
            'wallets': WalletSerializer(wallets, many=True).data,
        },
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )
