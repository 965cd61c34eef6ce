class GlobalMessages:
    # Auth Messages
    INVALID_CREDENTIALS = "Could not validate credentials. Please log in again."
    ROLE_FORBIDDEN = "You do not have access to this resource."
    PROFILE_NOT_FOUND = "Profile not found. Please complete onboarding."

    # Generic Messages
    RECORD_NOT_FOUND = "Record not found."
    ALREADY_RESOLVED = "This record has already been updated. Please refresh."
    INVALID_INPUT = "Invalid input provided."
    WRITE_FAILED = "The update could not be saved. Nothing was changed, please try again."

    # Notification Messages
    NOTIFICATION_NOT_FOUND = "Notification not found."

    # Request Messages
    REQUEST_NOT_FOUND = "Blood request not found."
    REQUEST_NOT_OPEN = "This blood request is no longer open."
    REQUEST_ASSIGNED_ELSEWHERE = "This blood request is handled by another clinic."
    REQUEST_REJECTED = "The blood request has been rejected."
    CASE_COMPLETED = "Case marked as completed."
    CASE_CANCELLED = "Case cancelled. Patient can request from other clinics."
    CASE_HAS_ACTIVE_MATCHES = "Cancel the open donor appointments for this case first."
    CASE_STATUS_INVALID = "Case status must be accepted or completed."

    # Match Messages
    DONOR_NOT_FOUND = "Donor not found."
    CLINIC_NOT_FOUND = "Clinic not found."
    APPOINTMENT_NOT_FOUND = "This match is no longer available."
    BLOOD_TYPE_MISMATCH = "Donor blood type does not match the request."
    MATCH_ALREADY_RESOLVED = "This request has already been accepted or closed."
    APPOINTMENT_DATE_REQUIRED = "Please select an appointment date."
    APPOINTMENT_DATE_IN_PAST = "Appointment date cannot be in the past."
    MATCH_CREATED = "Donor linked to the request. The donor has been notified."
    MATCH_ACCEPTED = "Appointment confirmed! Patient has been notified."
    MATCH_DECLINED = "Match declined. The clinic will find another donor."
    MATCH_CANCELLED = "Appointment cancelled."
    DONATION_COMPLETED = "Donation marked as completed."
