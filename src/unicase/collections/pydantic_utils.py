"""
基于 Pydantic v2 验证机制的通用工具集.

提供:
- 构建通用字段转换器 / 检查器(单值 / 列表), 供日志配置模型使用
- 扩展 BaseModel, 支持空值回退到字段默认值
- 为 UniCaseKey 与各容器类型生成 core schema, 使其可直接作为模型字段类型

容器字段示例:
    >>> class Request(BaseModel):
    ...     headers: UniCaseIndexMap[str]
    >>> Request(headers={"Accept": "*/*"}).headers["ACCEPT"]
    '*/*'
"""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Literal, get_args, get_origin

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    GetCoreSchemaHandler,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic_core import CoreSchema, PydanticCustomError, PydanticUndefined, core_schema


def _noop(data: Any) -> Any:
    return data


def convert(
    func: Callable[..., Any] | None = None,
    data_shape: Literal["obj", "list"] = "obj",
    ignore_none: bool = True,
    description: str | None = None,
    **func_kwds: Any,
) -> BeforeValidator:
    """
    构造一个在 Pydantic 验证前执行的值转换器.

    Args:
        func: 转换函数. obj: 接收单值, 返回单值; list: 逐个转换元素.
        data_shape: 输入数据结构类型.
        ignore_none: 值为 None 时是否跳过转换.
        description: 自定义错误信息.
        **func_kwds: 传给 `func` 的额外关键字参数.

    Returns:
        可用于 Pydantic 字段的转换器.
    """
    partial_func = partial(func, **func_kwds) if func else _noop

    def validator(data: Any) -> Any:
        if ignore_none and data is None:
            return data

        try:
            if data_shape == "list":
                return [partial_func(value) for value in data]
            return partial_func(data)
        except Exception as ex:
            raise PydanticCustomError(
                "Convert failed",
                "{reason}",
                {"reason": description or str(ex)},
            )

    return BeforeValidator(validator)


def check(
    func: Callable[..., Any] | None = None,
    data_shape: Literal["obj", "list"] = "obj",
    ignore_none: bool = True,
    check_result: bool = False,
    description: str | None = None,
    **func_kwds: Any,
) -> AfterValidator:
    """
    构造一个在 Pydantic 验证后执行的检查器.

    Args:
        func: 检查函数, 抛出异常或(check_result 为真时)返回假值即视为失败.
        data_shape: 输入数据结构类型.
        ignore_none: 值为 None 时是否跳过检查.
        check_result: 是否检查函数返回值为真.
        description: 自定义错误信息.
        **func_kwds: 传给 `func` 的额外关键字参数.

    Returns:
        可用于 Pydantic 字段的检查器.
    """
    partial_func = partial(func, **func_kwds) if func else _noop

    def validator(data: Any) -> Any:
        if ignore_none and data is None:
            return data

        try:
            values = data if data_shape == "list" else [data]
            for value in values:
                result = partial_func(value)
                if check_result and not result:
                    raise ValueError("Return value check failed")
        except Exception as ex:
            raise PydanticCustomError(
                "Check failed",
                "{reason}",
                {"reason": description or str(ex)},
            )
        return data

    return AfterValidator(validator)


class BaseModelEx(BaseModel):
    """
    扩展版 BaseModel.

    特性:
    - 当字段值为空(空序列/空集合/空字符串/None)时, 自动回退到字段默认值(若有)
    - 可通过配置项 `validate_default` 控制默认值是否经过验证
    """

    @field_validator("*", mode="wrap")
    @classmethod
    def use_default_value(
        cls: type[BaseModelEx],
        value: Any,
        validator: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
        /,
    ) -> Any:
        if value in ([], {}, (), set(), "", None):
            if info and info.field_name:
                field_info = cls.model_fields.get(info.field_name)
                if field_info:
                    default = field_info.get_default(call_default_factory=True)
                    if default is not PydanticUndefined:
                        if info.config and info.config.get("validate_default"):
                            return validator(default)
                        return default
        return validator(value)


# ===========================================================================


def key_schema(cls: type) -> CoreSchema:
    """
    UniCaseKey 的 core schema: 接受 str 或已有实例, 序列化为原始文本.
    """
    from_str = core_schema.no_info_after_validator_function(
        cls, core_schema.str_schema()
    )
    return core_schema.json_or_python_schema(
        json_schema=from_str,
        python_schema=core_schema.union_schema(
            [core_schema.is_instance_schema(cls), from_str]
        ),
        serialization=core_schema.plain_serializer_function_ser_schema(str),
    )


def _item_schema(source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
    args = get_args(source_type)
    if args:
        return handler.generate_schema(args[0])
    return core_schema.any_schema()


def map_schema(
    cls: type, source_type: Any, handler: GetCoreSchemaHandler
) -> CoreSchema:
    """
    映射容器的 core schema.

    - 输入: `{str: V}` 映射(值按泛型参数 V 验证)或已有实例.
    - 输出: 按迭代顺序的 `{原始键文本: 值}` 普通字典.
    """
    origin = get_origin(source_type) or cls
    value_schema = _item_schema(source_type, handler)
    dict_schema = core_schema.dict_schema(core_schema.str_schema(), value_schema)
    from_dict = core_schema.no_info_after_validator_function(origin, dict_schema)
    return core_schema.json_or_python_schema(
        json_schema=from_dict,
        python_schema=core_schema.union_schema(
            [core_schema.is_instance_schema(origin), from_dict]
        ),
        serialization=core_schema.plain_serializer_function_ser_schema(
            lambda value: {str(k): v for k, v in value.items()},
            return_schema=dict_schema,
        ),
    )


def set_schema(cls: type, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
    """
    集合容器的 core schema.

    - 输入: 字符串序列或已有实例.
    - 输出: 按迭代顺序的原始键文本列表.
    """
    list_schema = core_schema.list_schema(core_schema.str_schema())
    from_list = core_schema.no_info_after_validator_function(cls, list_schema)
    return core_schema.json_or_python_schema(
        json_schema=from_list,
        python_schema=core_schema.union_schema(
            [core_schema.is_instance_schema(cls), from_list]
        ),
        serialization=core_schema.plain_serializer_function_ser_schema(
            lambda value: [str(k) for k in value],
            return_schema=list_schema,
        ),
    )
