from enum import Enum


class UserRoleEnum(str, Enum):
    user = "User"
    admin = "Admin"


class CollectionTypeEnum(str, Enum):
    text_only = "text-only"
    text_and_star = "text-and-star"
    text_and_video = "text-and-video"


class ThemeEnum(str, Enum):
    light = "light"
    dark = "dark"
    minimal = "minimal"


class CollectExtraEnum(str, Enum):
    name = "name"
    email = "email"
    title = "title"
    social = "social"


class TestimonialTypeEnum(str, Enum):
    video = "video"
    text = "text"
    linked = "linked"


class CollectedViaEnum(str, Enum):
    link = "link"
    embed = "embed"
    import_ = "import"
    social = "social"


class TestimonialStatusEnum(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    archived = "archived"
    spam = "spam"
    deleted = "deleted"


class WidgetTypeEnum(str, Enum):
    wall = "wall"
    single = "single"


class WidgetStatusEnum(str, Enum):
    active = "active"
    disabled = "disabled"


class WallDesignTemplateEnum(str, Enum):
    grid_cards = "grid-cards"
    masonry = "masonry"
    carousel = "carousel"


class SingleDesignTemplateEnum(str, Enum):
    card_compact = "card-compact"
    hero = "hero"
    quote_overlay = "quote-overlay"


class WallSortOrderEnum(str, Enum):
    newest = "newest"
    highest_rating = "highest_rating"
    random = "random"


class SingleSelectionEnum(str, Enum):
    manual_select = "manual-select"
    auto_latest = "auto-latest"
    auto_random = "auto-random"


class ModerationActionEnum(str, Enum):
    approve = "approve"
    reject = "reject"
    archive = "archive"
    unarchive = "unarchive"
    spam = "spam"
    delete = "delete"
