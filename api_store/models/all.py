# Imported for their side effect of registering every table on Base.metadata.
from api_store.models.group import ApiGroup, UserGroup  # noqa: F401
from api_store.models.endpoint import Endpoint, Parameter, ParameterAlternative, UserEndpoint  # noqa: F401
from api_store.models.tenant import Tenant, TenantUser  # noqa: F401
from api_store.models.user import UserPreferences  # noqa: F401
from api_store.models.api_key import ApiKey, ApiUsageLog  # noqa: F401
from api_store.models.domain import Domain  # noqa: F401
from api_store.models.reference_data import ReferenceData  # noqa: F401
