from landed_cost.models.shipping_company import ShippingCompany  # noqa: F401
from landed_cost.models.warehouse import Warehouse  # noqa: F401
from landed_cost.models.rate_type import RateBracket, RateType  # noqa: F401
from landed_cost.models.company_cost import CompanyCostItem  # noqa: F401
from landed_cost.models.cost_setting import CostSetting  # noqa: F401
from landed_cost.models.factory import Factory, FactoryCostItem  # noqa: F401
from landed_cost.models.preset import FactoryPreset  # noqa: F401
from landed_cost.models.fx_rate import FxRateDaily  # noqa: F401
from landed_cost.models.enums import (  # noqa: F401
    CalculationStatus,
    ChargeType,
    CostSettingType,
    UnitType,
    WeightUnit,
)
