from __future__ import annotations

from pathlib import Path

import pytest

from substrate_manager.chain_spec import extract_chain_ids, load_chain_ids
from substrate_manager.errors import SourceParseError, UnsupportedShapeError

NODE_COMMAND_RS = """\
use crate::{chain_spec, cli::Cli, service};
use sc_cli::SubstrateCli;

impl SubstrateCli for Cli {
	fn impl_name() -> String {
		"Substrate Node".into()
	}

	fn load_spec(&self, id: &str) -> Result<Box<dyn sc_service::ChainSpec>, String> {
		Ok(match id {
			"dev" => Box::new(chain_spec::development_config()?),
			"" | "local" => Box::new(chain_spec::local_testnet_config()?),
			path =>
				Box::new(chain_spec::ChainSpec::from_json_file(std::path::PathBuf::from(path))?),
		})
	}
}
"""

FREE_FN_RS = """\
fn load_spec(id: &str) -> Result<Box<dyn ChainSpec>, String> {
	Ok(match id {
		"dev" => dev_config(),
		"local" | "local-testnet" => local_config(),
		other::PRESET => preset_config(),
	})
}
"""


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_ids_from_cli_trait_impl() -> None:
    assert extract_chain_ids(NODE_COMMAND_RS) == ["dev", "local"]


def test_ids_from_free_function_in_arm_order() -> None:
    assert extract_chain_ids(FREE_FN_RS) == ["dev", "local", "local-testnet", "preset"]


def test_union_of_alternatives_matches_separate_arms() -> None:
    combined = FREE_FN_RS
    split = FREE_FN_RS.replace(
        '"local" | "local-testnet" => local_config(),',
        '"local" => local_config(),\n\t\t"local-testnet" => local_config(),',
    )
    assert extract_chain_ids(combined) == extract_chain_ids(split)


def test_qualified_trait_path_and_guards() -> None:
    source = """\
impl sc_cli::SubstrateCli for Cli {
	fn load_spec(&self, id: &str) -> Result<Box<dyn ChainSpec>, String> {
		Ok(match id {
			// leading comment
			"rococo" if cfg!(feature = "rococo") => rococo(),
			r"raw-id" => raw(),
			Presets::Westend | Presets::Kusama => preset(id),
			path => from_json(path),
		})
	}
}
"""
    assert extract_chain_ids(source) == ["rococo", "raw-id", "westend", "kusama"]


@pytest.mark.parametrize("binding", ["path", "mut path", "ref path", "ref mut path", "path @ _"])
def test_binding_arms_contribute_nothing(binding: str) -> None:
    source = f"""\
fn load_spec(id: &str) -> Result<Box<dyn ChainSpec>, String> {{
	Ok(match id {{
		"dev" => dev_config(),
		{binding} => from_json(id),
	}})
}}
"""
    assert extract_chain_ids(source) == ["dev"]


def test_other_traits_and_functions_are_ignored() -> None:
    source = """\
impl OtherCli for Cli {
	fn load_spec(&self, id: &str) -> Result<Box<dyn ChainSpec>, String> {
		Ok(match id { "ignored" => a() })
	}
}

fn unrelated(id: &str) -> Result<u8, String> {
	Ok(match id { "nope" => 1, _ => 2 })
}
"""
    assert extract_chain_ids(source) == []


def test_duplicates_across_sources_are_kept() -> None:
    source = NODE_COMMAND_RS + "\n" + FREE_FN_RS
    assert extract_chain_ids(source) == ["dev", "local", "dev", "local", "local-testnet", "preset"]


def test_wildcard_arm_is_unsupported() -> None:
    source = """\
fn load_spec(id: &str) -> Result<Box<dyn ChainSpec>, String> {
	Ok(match id {
		"dev" => dev_config(),
		_ => fallback(),
	})
}
"""
    with pytest.raises(UnsupportedShapeError) as exc:
        extract_chain_ids(source)
    assert "line 4" in str(exc.value)


def test_tuple_pattern_is_unsupported() -> None:
    source = """\
fn load_spec(id: &str) -> Result<Box<dyn ChainSpec>, String> {
	Ok(match (id, 1) {
		("dev", _) => dev_config(),
	})
}
"""
    with pytest.raises(UnsupportedShapeError):
        extract_chain_ids(source)


def test_syntax_error_is_a_parse_error() -> None:
    with pytest.raises(SourceParseError):
        extract_chain_ids("fn load_spec(id: &str {\n")


def test_load_chain_ids_reads_node_command_source(tmp_path: Path) -> None:
    _write(tmp_path / "node" / "src" / "command.rs", NODE_COMMAND_RS)
    assert load_chain_ids(tmp_path / "node") == ["dev", "local"]


def test_load_chain_ids_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceParseError) as exc:
        load_chain_ids(tmp_path / "node")
    assert "Substrate.toml" in str(exc.value)
