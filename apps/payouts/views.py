import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import User
from apps.wallets.services import get_agent

from .serializers import (
    WithdrawalSerializer,
    WithdrawInputSerializer,
    WithdrawResponseSerializer,
    VerifyBankAccountInputSerializer,
    CompleteWithdrawalInputSerializer,
)
from apps.payouts.services import (
    request_withdrawal,
    verify_bank_account,
    complete_withdrawal_manually,
    # Exceptions
    AgentNotFoundError,
    InvalidWithdrawalAmountError,
    InvalidWalletTypeError,
    InsufficientBalanceError,
    PayoutProfileMissingError,
    PayoutProfileUnverifiedError,
    RecipientCreationError,
    WithdrawalInProgressError,
    WithdrawalNotFoundError,
    InvalidWithdrawalTransitionError,
    AdminRequiredError,
    BankVerificationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR = {'error': 'Internal server error'}


def _forbidden_unless_owner(agent, user):
    if agent.is_owned_by(user):
        return None
    return Response(
        {'error': 'You can only manage payouts for your own agent account'},
        status=status.HTTP_403_FORBIDDEN
    )


@extend_schema(
    request=WithdrawInputSerializer,
    responses={200: WithdrawResponseSerializer},
    description="Withdraw from an agent wallet to the agent's verified bank account.",
    tags=['payouts'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def withdraw(request):
    """Request a withdrawal (agent owner or staff)."""
    serializer = WithdrawInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        agent = get_agent(data['agent_id'])
    except AgentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    denied = _forbidden_unless_owner(agent, request.user)
    if denied:
        return denied

    try:
        result = request_withdrawal(
            agent_id=agent.id,
            amount=data['amount'],
            wallet_type=data.get('type') or None,
        )
    except (AgentNotFoundError, PayoutProfileMissingError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (
        InvalidWithdrawalAmountError,
        InvalidWalletTypeError,
        InsufficientBalanceError,
        PayoutProfileUnverifiedError,
        RecipientCreationError,
    ) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except WithdrawalInProgressError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    except Exception:
        logger.exception("Withdrawal request for agent %s failed", agent.id)
        return Response(INTERNAL_ERROR, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    withdrawal = result['withdrawal']
    body = {
        'success': result['success'],
        'withdrawal_id': withdrawal.id,
        'transfer_code': result['transfer_code'],
        'reference': withdrawal.reference,
        'status': withdrawal.status,
        'message': result['message'],
    }
    if not result['success']:
        body['error'] = result['message']
        return Response(body, status=status.HTTP_400_BAD_REQUEST)
    return Response(body)


@extend_schema(
    request=VerifyBankAccountInputSerializer,
    description="Resolve a bank account with the gateway and save it as the agent's payout account.",
    tags=['payouts'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def verify_bank(request):
    """Verify the agent's bank account (agent owner or staff)."""
    serializer = VerifyBankAccountInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        agent = get_agent(data['agent_id'])
    except AgentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    denied = _forbidden_unless_owner(agent, request.user)
    if denied:
        return denied

    try:
        profile = verify_bank_account(
            agent_id=agent.id,
            account_number=data['account_number'],
            bank_code=data['bank_code'],
        )
    except BankVerificationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Bank verification for agent %s failed", agent.id)
        return Response(INTERNAL_ERROR, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'success': True,
        'data': {
            'account_name': profile.account_name,
            'bank_name': profile.bank_name,
            'account_number': profile.account_number,
            'bank_code': profile.bank_code,
        },
    })


@extend_schema(
    request=CompleteWithdrawalInputSerializer,
    responses={200: WithdrawalSerializer},
    description="Mark a pending or processing withdrawal as completed (staff only).",
    tags=['payouts'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def complete_withdrawal(request, pk):
    """Manually complete a withdrawal."""
    serializer = CompleteWithdrawalInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    admin = request.user
    if data.get('admin_id'):
        admin = User.objects.filter(id=data['admin_id']).first()
        if admin is None:
            return Response({'error': 'Admin user not found'}, status=status.HTTP_404_NOT_FOUND)

    try:
        withdrawal = complete_withdrawal_manually(
            withdrawal_id=pk,
            admin=admin,
            reference=data.get('paystack_reference') or None,
            admin_notes=data.get('admin_notes', ''),
        )
    except AdminRequiredError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except WithdrawalNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidWithdrawalTransitionError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    except InsufficientBalanceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Manual completion of withdrawal %s failed", pk)
        return Response(INTERNAL_ERROR, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'success': True,
        'withdrawal': WithdrawalSerializer(withdrawal).data,
    })
