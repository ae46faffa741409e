# app/models/enums/service_type.py
import enum


class ServiceType(str, enum.Enum):
    credential_evaluation = "credential-evaluation"
    certified_translation = "certified-translation"
