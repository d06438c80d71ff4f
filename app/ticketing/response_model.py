def ResponseModel(data, message, code=200, **extra):
    return {
        "success": True,
        "data": data,
        "code": code,
        "message": message,
        **extra,
    }


def ErrorResponseModel(error, code, message):
    return {"success": False, "error": error, "code": code, "message": message}


def dump(schema, obj):
    """Serializes an ORM object (or a list of them) through an output schema."""
    if obj is None:
        return None
    if isinstance(obj, (list, tuple)):
        return [schema.model_validate(item).model_dump(mode="json") for item in obj]
    return schema.model_validate(obj).model_dump(mode="json")
