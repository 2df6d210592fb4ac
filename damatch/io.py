"""Matching instance input/output."""

import numpy as np
import json
import pickle
from scipy import io as sio

import damatch.instance

__all__ = ["save_json", "load_json", "save_mat", "load_mat",
           "save_pickle", "load_pickle"]


def _instance_fields(ins):
  return {
      "prop_prefs": ins.prop_prefs.tolist(),
      "resp_prefs": ins.resp_prefs.tolist(),
      "prop_caps": ins.prop_caps.tolist(),
      "resp_caps": ins.resp_caps.tolist()
  }


def _from_fields(fields):
  """Build an instance from a dict of preference matrices and capacities.

  Empty matrices lose their shape on the way through JSON, so the number of
  agents is taken from the capacity vectors.
  """
  prop_caps = np.asarray(fields["prop_caps"], dtype=np.int64).reshape(-1)
  resp_caps = np.asarray(fields["resp_caps"], dtype=np.int64).reshape(-1)
  num_prop, num_resp = len(prop_caps), len(resp_caps)
  return damatch.instance.MatchingInstance(
      prop_prefs=np.asarray(fields["prop_prefs"], dtype=np.int64).reshape(
          num_resp + 1, num_prop),
      resp_prefs=np.asarray(fields["resp_prefs"], dtype=np.int64).reshape(
          num_prop + 1, num_resp),
      prop_caps=prop_caps,
      resp_caps=resp_caps
  )


def save_json(ins, filename):
  """Save MatchingInstance to json format.

  Args:
    ins: a `MatchingInstance` object.
    filename: output file name.
  """
  with open(filename, mode="w") as g:
    json.dump(_instance_fields(ins), g, indent=4)


def load_json(filename):
  """Read instance from a json file of preferences.

  Args:
    filename: input json file name.
  Returns:
    A `MatchingInstance` object.
  """
  with open(filename) as f:
    all_fields = json.load(f)
  return _from_fields(all_fields)


def save_mat(ins, filename):
  """Save the instance to MATLAB style .mat file.

  Preference matrices keep their layout, one column per agent.

  Args:
    ins: A `MatchingInstance`.
    filename: output filename with or without '.mat' extension.
  """
  sio.savemat(
      filename,
      {
          "prop_prefs": ins.prop_prefs,
          "resp_prefs": ins.resp_prefs,
          "prop_caps": ins.prop_caps.reshape(-1, 1),
          "resp_caps": ins.resp_caps.reshape(-1, 1)
      }
  )


def load_mat(filename):
  """Read instance from a MATLAB style .mat file written by `save_mat`."""
  return _from_fields(sio.loadmat(filename))


def save_pickle(ins, filename):
  """Save MatchingInstance to python's pickle format.

  Args:
    ins: a `MatchingInstance`.
    filename: output file name.
  """
  with open(filename, "wb") as g:
    pickle.dump(_instance_fields(ins), g)


def load_pickle(filename):
  """Read instance from a python pickle file of preferences.

  Warning: As official python3 documentation has suggested, pickle format is NOT
  secure against adversarial attack. Please make sure you trust the source of the
  data file.

  Args:
    filename: pickle file name.
  Returns:
    A `MatchingInstance` object.
  """
  with open(filename, "rb") as f:
    all_data = pickle.load(f)
  return _from_fields(all_data)
