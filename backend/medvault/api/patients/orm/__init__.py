from medvault.api.patients.orm.patient_model import PatientModel

__all__ = ["PatientModel"]
