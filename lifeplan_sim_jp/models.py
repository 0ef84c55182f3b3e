"""Input data model: profile, housing, line items and life events."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, TypeVar

from lifeplan_sim_jp.params import SimulationParams

# 年金受給開始年齢の入力範囲
MIN_PENSION_START_AGE = 60
MAX_PENSION_START_AGE = 85


class Occupation(str, Enum):
    COMPANY_EMPLOYEE = "company_employee"
    PART_TIME_WITH_PENSION = "part_time_with_pension"
    PART_TIME_WITHOUT_PENSION = "part_time_without_pension"
    SELF_EMPLOYED = "self_employed"
    HOMEMAKER = "homemaker"


# 厚生年金の被保険者になる職業
WELFARE_PENSION_OCCUPATIONS = frozenset({
    Occupation.COMPANY_EMPLOYEE,
    Occupation.PART_TIME_WITH_PENSION,
})


class MaritalStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    PLANNING = "planning"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class HousingType(str, Enum):
    RENT = "rent"
    OWN = "own"


class SchoolChoice(str, Enum):
    PUBLIC = "公立"
    PRIVATE = "私立"
    NONE = "行かない"


class UniversityChoice(str, Enum):
    PUBLIC_HUMANITIES = "公立大学（文系）"
    PUBLIC_SCIENCE = "公立大学（理系）"
    PRIVATE_HUMANITIES = "私立大学（文系）"
    PRIVATE_SCIENCE = "私立大学（理系）"
    NONE = "行かない"


class IncomeCategory(str, Enum):
    SALARY = "salary"
    BUSINESS = "business"
    SIDE = "side"
    SPOUSE_SALARY = "spouse_salary"
    PENSION = "pension"
    SPOUSE_PENSION = "spouse_pension"
    REVENUE = "revenue"
    OTHER = "other"


class ExpenseCategory(str, Enum):
    LIVING = "living"
    HOUSING = "housing"
    EDUCATION = "education"
    BUSINESS = "business"
    OTHER = "other"


class AssetCategory(str, Enum):
    CASH = "cash"
    INVESTMENT = "investment"
    PROPERTY = "property"
    OTHER = "other"


class LiabilityCategory(str, Enum):
    LOAN = "loan"
    CREDIT = "credit"
    OTHER = "other"


class EventType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class EventSource(str, Enum):
    PERSONAL = "personal"
    CORPORATE = "corporate"


LIFE_EVENT_CATEGORIES: dict[EventType, tuple[str, ...]] = {
    EventType.INCOME: ("給与", "賞与", "副業", "その他"),
    EventType.EXPENSE: ("生活費", "住居費", "教育費", "医療費", "旅行", "その他"),
}

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: type[E], value, label: str) -> E:
    """Convert a raw value to enum_cls. Raises ValueError listing allowed values."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{label}「{value}」は不正です（{allowed}）") from None


class YearAmounts(dict[int, float]):
    """Sparse calendar year → amount (万円) mapping.

    Reading a year that was never set yields 0.0 without inserting it.
    Keys are normalised to int so JSON-loaded string keys behave the same.
    """

    def __init__(self, data=None):
        super().__init__()
        if data:
            for year, amount in dict(data).items():
                self[year] = amount

    def __missing__(self, year) -> float:
        return 0.0

    def __setitem__(self, year, amount) -> None:
        super().__setitem__(int(year), float(amount))

    def copy(self) -> "YearAmounts":
        return YearAmounts(self)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@dataclass
class RentConfig:
    monthly_rent: float = 0.0
    annual_increase_rate: float = 0.0
    renewal_fee: float = 0.0
    renewal_interval: int = 2


@dataclass
class OwnConfig:
    purchase_year: int
    purchase_price: float = 0.0
    loan_amount: float = 0.0
    interest_rate: float = 0.0
    loan_term_years: int = 35
    maintenance_cost_rate: float = 1.0

    @property
    def loan_end_year(self) -> int:
        """First year after amortization; only maintenance applies from here."""
        return self.purchase_year + self.loan_term_years


@dataclass
class HousingConfig:
    """Rent or own. Only the variant selected by `type` is kept."""

    type: HousingType = HousingType.RENT
    rent: RentConfig | None = field(default_factory=RentConfig)
    own: OwnConfig | None = None

    def __post_init__(self):
        self.type = _coerce(HousingType, self.type, "住居タイプ")
        if self.type is HousingType.RENT:
            if self.rent is None:
                raise ValueError("賃貸の場合は家賃設定（rent）が必要です")
            self.own = None
        else:
            if self.own is None:
                raise ValueError("持ち家の場合は購入設定（own）が必要です")
            self.rent = None


@dataclass
class EducationPlan:
    nursery: SchoolChoice = SchoolChoice.PUBLIC
    preschool: SchoolChoice = SchoolChoice.PUBLIC
    elementary: SchoolChoice = SchoolChoice.PUBLIC
    junior_high: SchoolChoice = SchoolChoice.PUBLIC
    high_school: SchoolChoice = SchoolChoice.PUBLIC
    university: UniversityChoice = UniversityChoice.PUBLIC_HUMANITIES

    def __post_init__(self):
        self.nursery = _coerce(SchoolChoice, self.nursery, "保育園")
        self.preschool = _coerce(SchoolChoice, self.preschool, "幼稚園")
        self.elementary = _coerce(SchoolChoice, self.elementary, "小学校")
        self.junior_high = _coerce(SchoolChoice, self.junior_high, "中学校")
        self.high_school = _coerce(SchoolChoice, self.high_school, "高校")
        self.university = _coerce(UniversityChoice, self.university, "大学")


@dataclass
class Child:
    current_age: int
    education_plan: EducationPlan = field(default_factory=EducationPlan)


@dataclass
class PlannedChild:
    years_from_now: int
    education_plan: EducationPlan = field(default_factory=EducationPlan)


@dataclass
class SpouseInfo:
    """Spouse record.

    married: current_age is the spouse's age at start_year.
    planning: marriage_age is the user's age at marriage, age the spouse's age then.
    """

    age: int | None = None
    current_age: int | None = None
    marriage_age: int | None = None
    occupation: Occupation | None = None
    additional_expense: float = 0.0

    def __post_init__(self):
        if self.occupation is not None:
            self.occupation = _coerce(Occupation, self.occupation, "配偶者の職業")


@dataclass
class Profile:
    current_age: int = 30
    start_year: int = field(default_factory=lambda: date.today().year)
    death_age: int = 80
    gender: Gender = Gender.MALE
    monthly_living_expense: float = 0.0
    occupation: Occupation = Occupation.COMPANY_EMPLOYEE
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    housing: HousingConfig = field(default_factory=HousingConfig)
    spouse: SpouseInfo | None = None
    children: list[Child] = field(default_factory=list)
    planned_children: list[PlannedChild] = field(default_factory=list)
    work_start_age: int = 22
    pension_start_age: int = 65
    work_after_pension: bool = False

    def __post_init__(self):
        self.gender = _coerce(Gender, self.gender, "性別")
        self.occupation = _coerce(Occupation, self.occupation, "職業")
        self.marital_status = _coerce(MaritalStatus, self.marital_status, "婚姻状況")
        if self.death_age < self.current_age:
            raise ValueError(
                f"想定寿命{self.death_age}歳が現在の年齢{self.current_age}歳を下回っています"
            )
        if not MIN_PENSION_START_AGE <= self.pension_start_age <= MAX_PENSION_START_AGE:
            raise ValueError(
                f"年金受給開始年齢{self.pension_start_age}歳は対象外です"
                f"（{MIN_PENSION_START_AGE}-{MAX_PENSION_START_AGE}歳）"
            )

    @property
    def horizon_years(self) -> int:
        return self.death_age - self.current_age + 1

    @property
    def end_year(self) -> int:
        return self.start_year + self.horizon_years - 1

    @property
    def years(self) -> range:
        return range(self.start_year, self.end_year + 1)

    def age_in(self, year: int) -> int:
        return self.current_age + (year - self.start_year)

    @property
    def marriage_year(self) -> int | None:
        """Calendar year of a planned marriage, None unless status is planning."""
        if self.marital_status is not MaritalStatus.PLANNING:
            return None
        if self.spouse is None or self.spouse.marriage_age is None:
            return None
        return self.start_year + (self.spouse.marriage_age - self.current_age)


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


@dataclass
class IncomeItem:
    id: str
    name: str
    category: IncomeCategory
    amounts: YearAmounts = field(default_factory=YearAmounts)
    investment_ratio: float = 10.0
    max_investment_amount: float = 100.0
    # 額面（手取り換算前）と手取りの保存先
    gross_amounts: YearAmounts = field(default_factory=YearAmounts)
    net_amounts: YearAmounts = field(default_factory=YearAmounts)
    is_auto_calculated: bool = False

    def __post_init__(self):
        self.category = _coerce(IncomeCategory, self.category, "収入区分")
        self.amounts = YearAmounts(self.amounts)
        self.gross_amounts = YearAmounts(self.gross_amounts)
        self.net_amounts = YearAmounts(self.net_amounts)

    def record_gross(self, year: int, gross: float, net: float) -> None:
        """Keep the entered gross figure and display the net figure."""
        self.gross_amounts[year] = gross
        self.net_amounts[year] = net
        self.amounts[year] = net

    def gross_for(self, year: int) -> float:
        """Gross amount for a year: the recorded original if any, else the entered amount."""
        if year in self.gross_amounts:
            return self.gross_amounts[year]
        return self.amounts[year]


@dataclass
class ExpenseItem:
    id: str
    name: str
    category: ExpenseCategory
    amounts: YearAmounts = field(default_factory=YearAmounts)

    def __post_init__(self):
        self.category = _coerce(ExpenseCategory, self.category, "支出区分")
        self.amounts = YearAmounts(self.amounts)


@dataclass
class AssetItem:
    id: str
    name: str
    category: AssetCategory
    amounts: YearAmounts = field(default_factory=YearAmounts)
    is_investment: bool = False

    def __post_init__(self):
        self.category = _coerce(AssetCategory, self.category, "資産区分")
        self.amounts = YearAmounts(self.amounts)


@dataclass
class LiabilityItem:
    id: str
    name: str
    category: LiabilityCategory
    amounts: YearAmounts = field(default_factory=YearAmounts)
    interest_rate: float | None = None
    term_years: int | None = None

    def __post_init__(self):
        self.category = _coerce(LiabilityCategory, self.category, "負債区分")
        self.amounts = YearAmounts(self.amounts)


T = TypeVar("T", IncomeItem, ExpenseItem, AssetItem, LiabilityItem)

SIDES = ("personal", "corporate")


@dataclass
class Section(Generic[T]):
    """Personal and corporate lists of one item kind. Ids are unique per side."""

    personal: list[T] = field(default_factory=list)
    corporate: list[T] = field(default_factory=list)

    def __post_init__(self):
        for side in SIDES:
            ids = [item.id for item in self.side(side)]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(f"{side}の項目IDが重複しています: {', '.join(duplicates)}")

    def side(self, name: str) -> list[T]:
        if name not in SIDES:
            raise ValueError(f"区分「{name}」は不正です（personal, corporate）")
        return getattr(self, name)

    def find(self, side: str, item_id: str) -> T | None:
        for item in self.side(side):
            if item.id == item_id:
                return item
        return None


@dataclass
class LifeEvent:
    year: int
    description: str
    type: EventType
    category: str
    amount: float
    source: EventSource = EventSource.PERSONAL

    def __post_init__(self):
        self.type = _coerce(EventType, self.type, "イベント種別")
        self.source = _coerce(EventSource, self.source, "イベント区分")
        allowed = LIFE_EVENT_CATEGORIES[self.type]
        if self.category not in allowed:
            raise ValueError(
                f"カテゴリ「{self.category}」は{self.type.value}イベントに使えません"
                f"（{', '.join(allowed)}）"
            )
        if not self.description:
            raise ValueError("イベント内容を入力してください")
        if self.amount < 0:
            raise ValueError("金額は0以上で入力してください")


@dataclass
class SimulationInput:
    """Everything the projection engine reads."""

    profile: Profile = field(default_factory=Profile)
    params: SimulationParams = field(default_factory=SimulationParams)
    income: Section[IncomeItem] = field(default_factory=Section)
    expense: Section[ExpenseItem] = field(default_factory=Section)
    assets: Section[AssetItem] = field(default_factory=Section)
    liabilities: Section[LiabilityItem] = field(default_factory=Section)
    life_events: list[LifeEvent] = field(default_factory=list)
