from gymnasium.envs.registration import register

register(
    id="Reversi-v0",
    entry_point="reversi.Env.env:ReversiEnv",
)
