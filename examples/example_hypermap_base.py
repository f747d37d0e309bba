import asyncio
import json
from pathlib import Path

import duckdb
import pandas as pd

from hyperind.core.config import BuildStateConfig
from hyperind.orchestration.orchestrator import build_state

EXAMPLES_ROOT = Path(__file__).parent
assert EXAMPLES_ROOT.name == "examples"
REPO_ROOT = EXAMPLES_ROOT.parent
OUT_ROOT = REPO_ROOT / "data_examples"

config = BuildStateConfig(
    rpc_url="https://base-rpc.publicnode.com",
    out_dir=OUT_ROOT,
    manifest_path=OUT_ROOT / "manifest.jsonl",
    events_out=OUT_ROOT / "hypermap_events.parquet",
)


async def main():
    output = await build_state(config=config)

    # Namespace snapshot as a flat frame, one row per named entry
    state = json.loads(output.state_path.read_text())
    df = pd.DataFrame.from_records(list(state.values()))
    print(len(df))
    print(df[["fullName", "owner", "creationBlock"]].sort_values("creationBlock").head(20))

    # Decoded events through duckdb: the most recent ~ip notes
    con = duckdb.connect()
    q = f"""
    SELECT block_number, log_index, parenthash, data
    FROM read_parquet('{output.events_path}')
    WHERE event='Note' AND label='{"0x" + "~ip".encode().hex()}'
    ORDER BY block_number DESC, log_index DESC
    LIMIT 10
    """
    print(con.execute(q).df())


asyncio.run(main())
