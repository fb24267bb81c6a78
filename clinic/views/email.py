from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..serializers.settings import SendPdfSerializer
from ..services.audit import log_action
from ..services.mailer import send_pdf


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_pdf_email(request):
    """Email a client-rendered PDF (data URL or bare base64) as an attachment."""
    s = SendPdfSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    send_pdf(
        email=v['email'],
        pdf_data=v['pdfData'],
        subject=v.get('subject'),
        message=v.get('message'),
        file_name=v.get('fileName'),
    )
    log_action(user=request.user, action='email_pdf', object_type='email', detail={'to': v['email']})
    return Response({'ok': True, 'message': 'Email sent successfully'})

send_pdf_email.cls.throttle_scope = 'email'
