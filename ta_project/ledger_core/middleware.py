from django.utils.deprecation import MiddlewareMixin

from .models import Company


class CurrentCompanyMiddleware(MiddlewareMixin):
    # Attach request.company for the logged-in user; views refuse to post without it
    def process_request(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            request.company = None
            return

        memberships = Company.objects.filter(
            memberships__user=user, memberships__is_active=True
        )

        # A company switched to in this session wins over the user's default
        company_id = request.session.get("active_company_id")
        if not company_id:
            company_id = getattr(user, "default_company_id", None)

        # user must be an active member; tampered sessions get no company
        request.company = memberships.filter(id=company_id).first() if company_id else None
