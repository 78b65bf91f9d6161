import math


def format_score(score) -> str:
    if score == math.inf:
        return "mate white"
    if score == -math.inf:
        return "mate black"
    return f"material {score:+d}" if isinstance(score, int) else f"material {score:+}"


def format_search_info(depth, score, nodes, elapsed, move) -> str:
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    move_str = move.uci() if move else "-"
    return (
        f"depth {depth} score {format_score(score)} nodes {nodes} "
        f"nps {nps} time {int(elapsed * 1000)} move {move_str}"
    )
