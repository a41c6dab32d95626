from tt_lib import Delimiter, Group, Ident, Punct, TokenStream


# Traditional approach - verbose and hard to read
def match_call_args(tokens: TokenStream) -> dict | None:
    match tokens:
        case (Ident() as func, Group(delimiter=Delimiter.PAREN, inner=inner)):
            pass
        case _:
            return None

    args = []
    for i, token in enumerate(inner):
        if i % 2 == 1:
            if not (isinstance(token, Punct) and token.text == ","):
                return None
        elif isinstance(token, Ident):
            args.append(token)
        else:
            return None
    if inner and i % 2 == 1:
        return None

    return {"func": func, "args": args}


# tt_lib approach - clean and intuitive
from tt_lib import MatchError, parse_pattern


def match_call_args(tokens: TokenStream) -> dict | None:
    pattern = parse_pattern("$func:ident($($args:ident),*)")
    try:
        return pattern.match(tokens).unstructure()
    except MatchError:
        return None
