"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Let domain errors reach the API exception handler for mapping
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from workshops import factory
from workshops.domain import (
    AttendanceStatus,
    AttendanceUpdate,
    RegistrationId,
    RegistrationStatus,
    WorkshopStatus,
)
from workshops.handlers.permissions import (
    HasWorkshopRole,
    HasWorkshopRoleForWrites,
    is_coordinator,
)
from workshops.handlers.serializers import (
    AttendanceUpdateSerializer,
    AttendeeCreateSerializer,
    AttendeeStatusQuerySerializer,
    CompleteRegistrationSerializer,
    InterestSerializer,
    RefundCreateSerializer,
    RefundEligibilitySerializer,
    RefundSerializer,
    RegistrationSerializer,
    WorkshopSerializer,
    WorkshopStatusQuerySerializer,
    WorkshopWriteSerializer,
)


def _validated(serializer_class, data, **kwargs) -> dict:
    serializer = serializer_class(data=data, **kwargs)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _workshop_response(workshop, message: str | None = None, **kwargs) -> Response:
    body = {"success": True, "workshop": WorkshopSerializer(workshop).data}
    if message:
        body["message"] = message
    return Response(body, **kwargs)


class WorkshopListView(APIView):
    """Handler for GET, POST /api/workshops"""

    permission_classes = [HasWorkshopRoleForWrites]

    def get(self, request: Request) -> Response:
        params = _validated(WorkshopStatusQuerySerializer, request.query_params)
        raw_status = params.get("status")
        workshops = factory.build_workshop_service().list_workshops(
            WorkshopStatus(raw_status) if raw_status else None,
            include_all=is_coordinator(request.user),
        )
        return Response(
            {"success": True, "workshops": WorkshopSerializer(workshops, many=True).data}
        )

    def post(self, request: Request) -> Response:
        values = _validated(WorkshopWriteSerializer, request.data)
        workshop = factory.build_workshop_service().create_workshop(
            values, request.user.user_id
        )
        return _workshop_response(workshop, status=status.HTTP_201_CREATED)


class WorkshopDetailView(APIView):
    """Handler for GET, PUT, DELETE /api/workshops/{workshop_id}"""

    permission_classes = [HasWorkshopRoleForWrites]

    def get(self, request: Request, workshop_id: str) -> Response:
        workshop = factory.build_workshop_service().get_workshop(workshop_id)
        return _workshop_response(workshop)

    def put(self, request: Request, workshop_id: str) -> Response:
        values = _validated(WorkshopWriteSerializer, request.data, partial=True)
        workshop = factory.build_workshop_service().update_workshop(workshop_id, values)
        return _workshop_response(workshop, "Workshop updated successfully")

    def delete(self, request: Request, workshop_id: str) -> Response:
        factory.build_workshop_service().delete_workshop(workshop_id)
        return Response({"success": True, "message": "Workshop deleted successfully"})


class WorkshopPublishView(APIView):
    """Handler for POST /api/workshops/{workshop_id}/publish"""

    permission_classes = [HasWorkshopRole]

    def post(self, request: Request, workshop_id: str) -> Response:
        workshop = factory.build_workshop_service().publish_workshop(workshop_id)
        return _workshop_response(workshop, "Workshop published successfully")


class WorkshopFinishView(APIView):
    """Handler for PATCH /api/workshops/{workshop_id}/finish"""

    permission_classes = [HasWorkshopRole]

    def patch(self, request: Request, workshop_id: str) -> Response:
        workshop = factory.build_workshop_service().finish_workshop(workshop_id)
        return _workshop_response(workshop, "Workshop finished successfully")


class WorkshopCancelView(APIView):
    """Handler for POST /api/workshops/{workshop_id}/cancel"""

    permission_classes = [HasWorkshopRole]

    def post(self, request: Request, workshop_id: str) -> Response:
        workshop = factory.build_workshop_service().cancel_workshop(
            workshop_id, request.user.user_id
        )
        return _workshop_response(workshop, "Workshop cancelled successfully")


class AttendeeListView(APIView):
    """Handler for GET, POST /api/workshops/{workshop_id}/attendees"""

    permission_classes = [HasWorkshopRole]

    def get(self, request: Request, workshop_id: str) -> Response:
        params = _validated(AttendeeStatusQuerySerializer, request.query_params)
        raw_status = params.get("status")
        attendees = factory.build_registration_service().list_attendees(
            workshop_id, RegistrationStatus(raw_status) if raw_status else None
        )
        return Response(
            {
                "success": True,
                "attendees": RegistrationSerializer(attendees, many=True).data,
            }
        )

    def post(self, request: Request, workshop_id: str) -> Response:
        data = _validated(AttendeeCreateSerializer, request.data)
        attendee = factory.build_registration_service().add_attendee(
            workshop_id, str(data["user_profile_id"]), data["priority"]
        )
        return Response(
            {"success": True, "attendee": RegistrationSerializer(attendee).data}
        )


class AttendeeCancelView(APIView):
    """Handler for POST /api/workshops/{workshop_id}/attendees/{attendee_id}/cancel"""

    permission_classes = [HasWorkshopRole]

    def post(self, request: Request, workshop_id: str, attendee_id: str) -> Response:
        attendee = factory.build_registration_service().cancel_attendee(
            workshop_id, attendee_id
        )
        return Response(
            {
                "success": True,
                "message": "Attendee cancelled successfully",
                "attendee": RegistrationSerializer(attendee).data,
            }
        )


class AttendanceView(APIView):
    """Handler for GET, PUT /api/workshops/{workshop_id}/attendance"""

    permission_classes = [HasWorkshopRole]

    def get(self, request: Request, workshop_id: str) -> Response:
        attendees = factory.build_attendance_service().get_attendance(workshop_id)
        return Response(
            {
                "success": True,
                "attendees": RegistrationSerializer(attendees, many=True).data,
            }
        )

    def put(self, request: Request, workshop_id: str) -> Response:
        data = _validated(AttendanceUpdateSerializer, request.data)
        updates = [
            AttendanceUpdate(
                registration_id=RegistrationId(item["registration_id"]),
                attendance_status=AttendanceStatus(item["attendance_status"]),
                notes=item.get("notes"),
            )
            for item in data["attendance_updates"]
        ]
        updated = factory.build_attendance_service().update_attendance(
            workshop_id, updates, request.user.user_id
        )
        return Response(
            {
                "success": True,
                "updated": len(updated),
                "attendees": RegistrationSerializer(updated, many=True).data,
            }
        )


class RefundListView(APIView):
    """Handler for GET, POST /api/workshops/{workshop_id}/refunds"""

    permission_classes = [HasWorkshopRole]

    def get(self, request: Request, workshop_id: str) -> Response:
        refunds = factory.build_refund_service().list_refunds(workshop_id)
        return Response(
            {"success": True, "refunds": RefundSerializer(refunds, many=True).data}
        )

    def post(self, request: Request, workshop_id: str) -> Response:
        data = _validated(RefundCreateSerializer, request.data)
        refund = factory.build_refund_service().process_refund(
            workshop_id,
            str(data["registration_id"]),
            data["reason"],
            request.user.user_id,
        )
        return Response(
            {"success": True, "refund": RefundSerializer(refund).data},
            status=status.HTTP_201_CREATED,
        )


class RefundEligibilityView(APIView):
    """Handler for GET /api/workshops/{workshop_id}/refunds/eligibility/{registration_id}"""

    permission_classes = [HasWorkshopRole]

    def get(self, request: Request, workshop_id: str, registration_id: str) -> Response:
        eligibility = factory.build_refund_service().check_eligibility(
            workshop_id, registration_id
        )
        return Response(
            {
                "success": True,
                "eligibility": RefundEligibilitySerializer(eligibility).data,
            }
        )


class InterestView(APIView):
    """Handler for POST /api/workshops/{workshop_id}/interest"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, workshop_id: str) -> Response:
        result = factory.build_registration_service().toggle_interest(
            workshop_id, request.user.user_id
        )
        return Response(
            {
                "success": True,
                "action": result.action,
                "message": result.message,
                "interest": (
                    InterestSerializer(result.interest).data if result.interest else None
                ),
            }
        )


class RegisterView(APIView):
    """Handler for POST, DELETE /api/workshops/{workshop_id}/register"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, workshop_id: str) -> Response:
        checkout = factory.build_registration_service().start_registration(
            workshop_id, request.user.user_id
        )
        if checkout.registration is not None:
            return Response(
                {
                    "success": True,
                    "requires_payment": False,
                    "registration": RegistrationSerializer(checkout.registration).data,
                },
                status=status.HTTP_201_CREATED,
            )
        return Response(
            {
                "success": True,
                "requires_payment": True,
                "payment_intent_id": checkout.payment_intent_id,
                "client_secret": checkout.client_secret,
                "amount": checkout.amount,
                "currency": checkout.currency,
            }
        )

    def delete(self, request: Request, workshop_id: str) -> Response:
        registration = factory.build_registration_service().cancel_registration(
            workshop_id, request.user.user_id
        )
        return Response(
            {
                "success": True,
                "message": "Registration cancelled successfully",
                "registration": RegistrationSerializer(registration).data,
            }
        )


class RegisterCompleteView(APIView):
    """Handler for POST /api/workshops/{workshop_id}/register/complete"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, workshop_id: str) -> Response:
        data = _validated(CompleteRegistrationSerializer, request.data)
        registration = factory.build_registration_service().complete_registration(
            workshop_id, request.user.user_id, data["payment_intent_id"]
        )
        return Response(
            {"success": True, "registration": RegistrationSerializer(registration).data},
            status=status.HTTP_201_CREATED,
        )
