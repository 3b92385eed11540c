# apps/communication/defaults.py
"""
Built-in email templates, used whenever no active database template overrides them.
"""

from .models import EventKind


FOOTER = """
<hr>
<p style="font-size: 12px; color: #6c757d;">
  This is an automated message from the {{ school_name }} Behavior Monitoring System.
  Please do not reply to this email.
</p>
"""

DEFAULT_TEMPLATES = {
    EventKind.VIOLATION_ASSIGNED: {
        'description': 'Sent to the student and parent (teacher in cc) when a detention is assigned.',
        'subject': 'Detention Notice - {{ school_name }}',
        'body_html': """
<h2>Detention Notice</h2>
<p>Dear {{ student_name }} and Parent/Guardian,</p>
<p>This email is to inform you that {{ student_name }} has been assigned detention for the following violation:</p>
<div style="margin: 20px 0; padding: 15px; background-color: #f8f9fa; border-radius: 5px;">
  <p><strong>Violation:</strong> {{ violation_type }}</p>
  <p><strong>Date Assigned:</strong> {{ assigned_date }}</p>
  <p><strong>Detention Date:</strong> {{ detention_date }}</p>
  <p><strong>Time:</strong> {{ detention_time }}</p>
  <p><strong>Location:</strong> {{ location }}</p>
  <p><strong>Assigned By:</strong> {{ teacher_name }}</p>
</div>
{% if show_access_code %}
<div style="margin: 20px 0; padding: 15px; background-color: #e8f5e9; border-radius: 5px;">
  <h3 style="margin-top: 0; color: #2e7d32;">Parent Portal Access</h3>
  <p>To access the parent portal and view your student's complete behavior record, use this access code:</p>
  <p style="font-size: 24px; font-weight: bold; text-align: center;">{{ access_code }}</p>
  <p>Visit <a href="{{ parent_portal_url }}">the parent portal</a> and enter this code to get started.</p>
</div>
{% endif %}
<p><strong>Important Information:</strong></p>
<ul>
  <li>Please arrive promptly at {{ detention_time }}</li>
  <li>Bring study materials or reading material</li>
  <li>Electronic devices must be turned off and put away</li>
  <li>Failure to attend may result in additional disciplinary action</li>
  <li>Parents must make arrangements for transportation after detention</li>
</ul>
<p>If you have any questions or concerns, please contact {{ teacher_name }} at {{ teacher_email }} or visit the main office.</p>
<p>Thank you for your cooperation.</p>
""" + FOOTER,
        'variables': [
            'student_name', 'violation_type', 'assigned_date', 'detention_date', 'detention_time',
            'location', 'teacher_name', 'teacher_email', 'show_access_code', 'access_code',
            'parent_portal_url', 'school_name',
        ],
    },
    EventKind.DETENTION_RESCHEDULED: {
        'description': 'Sent to the student and the issuing teacher after an automatic reschedule.',
        'subject': 'Detention Rescheduled',
        'body_html': """
<h2>Detention Rescheduled Notice</h2>
<p>Dear {{ student_name }},</p>
<p>Due to your absence from detention, you have been rescheduled for:</p>
<p><strong>Date:</strong> {{ detention_date }}</p>
<p><strong>Time:</strong> {{ detention_time }}</p>
<p><strong>Location:</strong> {{ location }}</p>
<p>Please ensure you attend this session. Multiple absences may result in additional disciplinary action.</p>
<p>Original Violation: {{ violation_type }}</p>
<p>If you have any questions, please contact your teacher.</p>
""" + FOOTER,
        'variables': [
            'student_name', 'detention_date', 'detention_time', 'location', 'violation_type',
            'reschedule_count', 'school_name',
        ],
    },
    EventKind.TEACHER_APPROVED: {
        'description': 'Sent to a teacher when an administrator approves the account.',
        'subject': '{{ school_name }} Monitor Account Approved',
        'body_html': """
<h2>Account Approved</h2>
<p>Dear {{ teacher_name }},</p>
<p>Your {{ school_name }} Monitor account has been approved. You now have access to:</p>
<ul>
  <li>Assign detentions to students</li>
  <li>Sign up for detention monitoring duty</li>
  <li>View and manage student records</li>
  <li>Access behavior analytics</li>
</ul>
<p>You can now log in and start using all features of the system.</p>
<p>Thank you for your patience during the approval process.</p>
""" + FOOTER,
        'variables': ['teacher_name', 'school_name'],
    },
    EventKind.TEACHER_SUSPENDED: {
        'description': 'Sent to a teacher when an administrator revokes approval.',
        'subject': '{{ school_name }} Monitor Account Status Update',
        'body_html': """
<h2>Account Status Update</h2>
<p>Dear {{ teacher_name }},</p>
<p>Your {{ school_name }} Monitor account access has been temporarily suspended.</p>
<p>Please contact the administration for more information.</p>
<p>If you believe this is an error, please reach out to the system administrator.</p>
""" + FOOTER,
        'variables': ['teacher_name', 'school_name'],
    },
    EventKind.MONITOR_SIGNUP: {
        'description': 'Confirmation sent to a teacher who volunteered for detention duty.',
        'subject': 'Thank You for Signing Up as Detention Monitor',
        'body_html': """
<h2>Thank you for signing up as a detention monitor, {{ teacher_name }}!</h2>
<p>You have been scheduled for the following dates:</p>
<ul>
{% for date in dates %}  <li>{{ date }}</li>
{% endfor %}</ul>
<p>Please arrive at {{ location }} by {{ detention_time }} on your scheduled dates.</p>
<p>You will receive a reminder email on the morning of each scheduled date.</p>
<p>Thank you for your commitment to maintaining our school's standards!</p>
""" + FOOTER,
        'variables': ['teacher_name', 'dates', 'location', 'detention_time', 'school_name'],
    },
    EventKind.MONITOR_REMINDER: {
        'description': 'Morning reminder sent to each teacher on detention duty that day.',
        'subject': 'Detention Monitor Duty Reminder',
        'body_html': """
<h2>Detention Monitor Duty Reminder</h2>
<p>Hello {{ teacher_name }},</p>
<p>This is a reminder that you are scheduled for detention monitor duty today.</p>
<p><strong>Location:</strong> {{ location }}</p>
<p><strong>Time:</strong> {{ detention_time }}</p>
<p><strong>Students scheduled:</strong> {{ student_count }}</p>
<p>Please arrive on time to ensure proper supervision of students.</p>
<p>Thank you for your service!</p>
""" + FOOTER,
        'variables': ['teacher_name', 'location', 'detention_time', 'student_count', 'school_name'],
    },
    EventKind.TEST: {
        'description': 'Configuration check sent by the test_email command.',
        'subject': '{{ school_name }} email configuration test',
        'body_html': """
<h2>Email configuration test</h2>
<p>If you can read this, outgoing email for the {{ school_name }} Behavior Monitoring System works.</p>
""" + FOOTER,
        'variables': ['school_name'],
    },
}
