"""
Keyword routing tables.

Keys are matched as case-insensitive substrings of the user's question.
Iteration order is the render order of the matched targets.
"""

from typing import Dict, List, Tuple

_CONDUCT_DOCS = ["code_of_conduct_part1", "code_of_conduct_part2", "code_of_conduct_part3"]

# keyword -> whole policy document ids
POLICY_DOCUMENT_KEYWORDS: Dict[str, List[str]] = {
    "academic honesty": ["academic_honesty_policy"],
    "cheating": ["academic_honesty_policy"],
    "plagiarism": ["academic_honesty_policy"],
    "honor code": ["academic_honesty_policy"],
    "academic integrity": ["academic_honesty_policy"],
    "academic dishonesty": ["academic_honesty_policy"],
    "code of conduct": _CONDUCT_DOCS,
    "student conduct": _CONDUCT_DOCS,
    "disciplin": _CONDUCT_DOCS,
    "sanction": _CONDUCT_DOCS,
    "judiciary": _CONDUCT_DOCS,
    "hearing": _CONDUCT_DOCS,
    "violation": _CONDUCT_DOCS,
    "computer use": ["computer_use_policy"],
    "acceptable use": ["computer_use_policy"],
    "network": ["computer_use_policy"],
    "hacking": ["computer_use_policy"],
    "copyright": ["computer_use_policy"],
    "download": ["computer_use_policy"],
    "piracy": ["computer_use_policy"],
    "minor": ["minors_policy"],
    "child": ["minors_policy"],
    "youth program": ["minors_policy"],
    "camp": ["minors_policy"],
    "discrimination": ["ndah_policy"],
    "harassment": ["ndah_policy"],
    "title ix": ["ndah_policy"],
    "sexual misconduct": ["ndah_policy"],
    "equal opportunity": ["ndah_policy"],
    "bias": ["ndah_policy"],
    "retaliation": ["ndah_policy"],
    "protected class": ["ndah_policy"],
    "reporting": ["ndah_policy"],
}

_ANIMALS = [
    "policies.pets",
    "services_for_students_with_disabilities.emotional_support_animals",
    "services_for_students_with_disabilities.service_animals",
]

# keyword -> dot paths inside the community guide
GUIDE_SECTION_KEYWORDS: Dict[str, List[str]] = {
    "quiet hours": ["policies.noise_courtesy_and_quiet_hours"],
    "noise": ["policies.noise_courtesy_and_quiet_hours"],
    "courtesy hours": ["policies.noise_courtesy_and_quiet_hours"],
    "guest": ["policies.visitation"],
    "visitor": ["policies.visitation"],
    "visitation": ["policies.visitation"],
    "overnight": ["policies.visitation"],
    "alcohol": ["policies.alcohol_and_other_drugs"],
    "drug": ["policies.alcohol_and_other_drugs"],
    "pet": _ANIMALS,
    "animal": _ANIMALS,
    "fire": ["policies.fire_safety", "fire_evacuation_and_severe_weather_shelter"],
    "evacuation": ["fire_evacuation_and_severe_weather_shelter"],
    "tornado": ["general_information.tornado_warning", "general_information.tornado_watch"],
    "weapon": ["policies.firearms_weapons_and_explosives"],
    "gun": ["policies.firearms_weapons_and_explosives"],
    "knife": ["policies.firearms_weapons_and_explosives"],
    "appliance": ["policies.appliances_and_electronic_devices"],
    "microwave": ["policies.appliances_and_electronic_devices"],
    "fridge": ["policies.appliances_and_electronic_devices"],
    "refrigerator": ["policies.appliances_and_electronic_devices"],
    "cooking": ["policies.cooking_guidelines"],
    "cook": ["policies.cooking_guidelines"],
    "kitchen": ["policies.cooking_guidelines"],
    "decoration": ["policies.decorations"],
    "poster": ["policies.decorations"],
    "candle": ["policies.decorations", "policies.fire_safety"],
    "key": ["policies.lock_security"],
    "lock": ["policies.lock_security"],
    "lockout": ["policies.lock_security"],
    "bike": ["policies.bicycles_and_transportation_devices"],
    "scooter": ["policies.bicycles_and_transportation_devices"],
    "parking": ["policies.bicycles_and_transportation_devices"],
    "smoke": ["policies.smoking"],
    "tobacco": ["policies.smoking"],
    "vape": ["policies.smoking"],
    "mail": ["general_information.mail_and_packages"],
    "package": ["general_information.mail_and_packages"],
    "laundry": ["general_information.laundry_facilities"],
    "wifi": ["general_information.internet_connectivity"],
    "internet": ["general_information.internet_connectivity"],
    "ethernet": ["general_information.internet_connectivity"],
    "maintenance": ["general_information.work_requests"],
    "work request": ["general_information.work_requests"],
    "repair": ["general_information.work_requests"],
    "recycl": ["policies.recycling_and_trash"],
    "trash": ["policies.recycling_and_trash"],
    "compost": ["policies.recycling_and_trash"],
    "conduct": ["student_conduct"],
    "roommate": ["community_living_standards"],
    "room change": ["policies.room_apartment_entry"],
    "furniture": ["policies.room_apartment_furnishings"],
    "bed": ["policies.lofts", "policies.room_apartment_furnishings"],
    "loft": ["policies.lofts"],
    "damage": ["policies.vandalism_and_damages"],
    "vandal": ["policies.vandalism_and_damages"],
    "insurance": ["general_information.responsibility_for_student_property"],
    "staff": ["housing_staff"],
    "ra ": ["housing_staff.resident_assistants"],
    "phone": ["important_phone_numbers"],
    "number": ["important_phone_numbers"],
    "contact": ["important_phone_numbers"],
    "front desk": ["important_phone_numbers.community_offices", "general_information.community_desk"],
    "summer": ["summer_housing"],
    "disability": ["services_for_students_with_disabilities"],
    "accommodation": ["services_for_students_with_disabilities"],
    "health check": ["general_information.health_and_safety_checks"],
    "inspection": ["general_information.health_and_safety_checks"],
    "camera": ["general_information.cameras"],
    "emergency": ["general_information.uga_alert", "important_phone_numbers.safety_numbers"],
    "uga alert": ["general_information.uga_alert"],
    "solicitation": ["policies.solicitation_and_fundraising"],
    "window": ["policies.windows_and_screens"],
    "screen": ["policies.windows_and_screens"],
    "oil diffuser": ["policies.essential_oil_diffusers"],
    "diffuser": ["policies.essential_oil_diffusers"],
    "contract": ["contract_review_process"],
    "appeal": ["contract_review_process.review_appeal"],
    "community council": ["community_activities.community_councils"],
    "rha": ["community_activities.residence_hall_association"],
    "event": ["community_activities"],
    "census": ["policies.us_census_surveys"],
    "access": ["policies.access_control"],
    "ugacard": ["policies.access_control"],
    "buzzcard": ["policies.access_control"],
}

# Used when no guide keyword matches, so novel phrasing still gets context.
DEFAULT_GUIDE_PATHS: Tuple[str, ...] = ("policies", "general_information")
