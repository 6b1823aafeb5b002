from flask import request


def request_payload():
    """JSON body when present, otherwise the submitted form as a plain dict"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def search_arg():
    q = request.args.get('q', type=str)
    return q.strip() if q and q.strip() else None
