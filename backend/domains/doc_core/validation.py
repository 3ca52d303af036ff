"""
文档校验工具

基于 pydantic 的文档级校验:
- 未知字段直接丢弃
- 字符串去除首尾空白，必填字符串不允许为空
- 数值范围检查（越界即校验失败，不做截断）
- 错误信息统一格式化为 ``"<path>" <reason>``，如 ``"name" is required``

每种文档用一对模型描述（创建模型、更新模型），通过 DocumentValidator 选择。
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Optional, Sequence

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_uri(value: str) -> str:
    """校验 URI 格式，保留原始字符串不做规范化"""
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise PydanticCustomError("uri", "must be a valid uri") from None
    return value


def one_of(*allowed: str):
    """构造枚举取值校验器"""
    valids = ", ".join(allowed)

    def _check(value: str) -> str:
        if value not in allowed:
            raise PydanticCustomError("any_only", "must be one of [{valids}]", {"valids": valids})
        return value

    return AfterValidator(_check)


# ==================== 字段类型 ====================

# 去空白后非空
Trimmed = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# 去空白，允许空串
TrimmedOrEmpty = Annotated[str, StringConstraints(strip_whitespace=True)]
# 非空，不去空白
NonEmpty = Annotated[str, StringConstraints(min_length=1)]
# 允许空串
Text = str
Uri = Annotated[str, AfterValidator(_check_uri)]
IdList = list[Trimmed]
Priority = Annotated[int, Field(ge=0, le=10)]
UnreadCount = Annotated[int, Field(ge=0)]


class DocumentPayload(BaseModel):
    """所有文档校验模型的基类：丢弃未知字段"""

    model_config = ConfigDict(extra="ignore")


# ==================== 错误格式化 ====================

_REASONS = {
    "missing": "is required",
    "string_type": "must be a string",
    "string_too_short": "is not allowed to be empty",
    "int_type": "must be a number",
    "int_parsing": "must be a number",
    "int_from_float": "must be an integer",
    "list_type": "must be an array",
    "dict_type": "must be of type object",
    "model_type": "must be of type object",
    "model_attributes_type": "must be of type object",
    "datetime_type": "must be a valid date",
    "datetime_parsing": "must be a valid date",
    "datetime_from_date_parsing": "must be a valid date",
    "bool_type": "must be a boolean",
    "bool_parsing": "must be a boolean",
}

_CUSTOM_TYPES = {"uri", "any_only", "array_unique"}


def format_path(loc: tuple) -> str:
    """('subcategories', 0, 'name') -> 'subcategories[0].name'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "value"


def _reason(error: dict[str, Any]) -> str:
    error_type = error["type"]
    ctx = error.get("ctx") or {}
    if error_type in _CUSTOM_TYPES:
        return error["msg"]
    if error_type == "greater_than_equal":
        return f"must be greater than or equal to {ctx.get('ge')}"
    if error_type == "less_than_equal":
        return f"must be less than or equal to {ctx.get('le')}"
    return _REASONS.get(error_type, error["msg"])


@dataclass
class ValidationFailure:
    """校验失败：首条错误信息 + 全部错误明细"""
    message: str
    details: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ValidationResult:
    """
    校验结果

    error 与 value 二者必有其一:
    - 成功: error=None, value=规范化后的文档（JSON 兼容类型）
    - 失败: error=ValidationFailure, value=None
    """
    error: Optional[ValidationFailure] = None
    value: Optional[dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def describe_errors(errors: Sequence[dict[str, Any]], skip_prefix: int = 0) -> list[dict[str, Any]]:
    """
    将 pydantic 错误列表转换为 ``{path, message, type}`` 明细

    Args:
        errors: ``ValidationError.errors()`` 格式的错误列表
        skip_prefix: 忽略 loc 开头的层数（请求校验错误的 loc 以 "body"/"query" 开头）
    """
    details = []
    for error in errors:
        path = format_path(tuple(error["loc"])[skip_prefix:])
        details.append({
            "path": path,
            "message": f'"{path}" {_reason(error)}',
            "type": error["type"],
        })
    return details


def format_validation_error(exc: PydanticValidationError) -> ValidationFailure:
    """将 pydantic 校验异常转换为 ValidationFailure"""
    details = describe_errors(exc.errors())
    return ValidationFailure(message=details[0]["message"], details=details)


def validate_document(schema: type[BaseModel], data: Any) -> ValidationResult:
    """
    用指定模型校验文档

    Returns:
        ValidationResult，value 只包含调用方提供的字段
    """
    if not isinstance(data, dict):
        message = '"value" must be of type object'
        return ValidationResult(error=ValidationFailure(
            message=message,
            details=[{"path": "value", "message": message, "type": "dict_type"}],
        ))
    try:
        model = schema.model_validate(data)
    except PydanticValidationError as exc:
        return ValidationResult(error=format_validation_error(exc))
    return ValidationResult(value=model.model_dump(mode="json", exclude_unset=True, exclude_none=True))


@dataclass(frozen=True)
class DocumentValidator:
    """
    创建/更新双模型校验器

    使用示例:
        validate_topic = DocumentValidator(TopicCreate, TopicUpdate)
        result = validate_topic({"name": "AI"}, is_update=False)
    """
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]

    def __call__(self, data: Any, is_update: bool = False) -> ValidationResult:
        schema = self.update_schema if is_update else self.create_schema
        return validate_document(schema, data)
